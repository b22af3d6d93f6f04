import argparse
import logging
import os
import shutil
import sys

from .client import Client
from .config import ClientConfig, GetPathsOptions
from .errors import TrackerFSError


def _client(args):
    config = ClientConfig.from_env(
        domain=args.domain,
        trackers=args.trackers.split(",") if args.trackers else None,
        dial_timeout=args.dial_timeout,
        io_timeout=args.io_timeout,
    )
    return Client.from_config(config)


def info(args):
    client = _client(args)
    print(f"# details about '{args.key}' on domain '{client.domain}' "
          f"using {len(client.pool.trackers)} tracker(s)")
    try:
        paths = client.get_paths(args.key, GetPathsOptions(no_verify=True, path_count=64))
    except TrackerFSError as e:
        print("copies = 0")
        print(f"error = {e}")
        return 1
    print(f"copies = {len(paths)}")
    for i, path in enumerate(paths, 1):
        print(f"path{i} = {path}")
    return 0


def rename(args):
    _client(args).rename(args.from_key, args.to_key)
    print("success")
    return 0


def delete(args):
    _client(args).delete(args.key)
    print("success")
    return 0


def debug(args):
    values = _client(args).debug(args.key)
    for k in sorted(values):
        print(f"{k} = {values[k]}")
    return 0


def fetch(args):
    stream = _client(args).fetch(args.key)
    try:
        if args.local_path:
            with open(args.local_path, "wb") as f:
                shutil.copyfileobj(stream, f)
            print(f"Downloaded {args.key} to {args.local_path}", file=sys.stderr)
        else:
            shutil.copyfileobj(stream, sys.stdout.buffer)
            sys.stdout.buffer.flush()
    finally:
        stream.close()
    return 0


def create(args):
    client = _client(args)
    if args.local_path:
        with open(args.local_path, "rb") as f:
            values = client.create(args.key, args.klass, f)
    else:
        values = client.create(args.key, args.klass, sys.stdin.buffer)
    logging.getLogger(__name__).debug("create_close reply: %s", values)
    print("success")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="trackerfs")
    parser.add_argument("--trackers", default=None,
                        help="comma separated host:port list (default $TRACKERFS_TRACKERS or localhost:7001)")
    parser.add_argument("--domain", default=os.getenv("TRACKERFS_DOMAIN", ""),
                        help="the domain to use for this request")
    parser.add_argument("--dial-timeout", type=float, default=None)
    parser.add_argument("--io-timeout", type=float, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd")

    p = sub.add_parser("info", help="print the paths of a key")
    p.add_argument("key")
    p.set_defaults(func=info)

    p = sub.add_parser("rename", help="rename a key")
    p.add_argument("from_key")
    p.add_argument("to_key")
    p.set_defaults(func=rename)

    p = sub.add_parser("delete", help="delete a key")
    p.add_argument("key")
    p.set_defaults(func=delete)

    p = sub.add_parser("debug", help="print the tracker's debug info for a key")
    p.add_argument("key")
    p.set_defaults(func=debug)

    p = sub.add_parser("fetch", help="download a key to LOCAL_PATH or stdout")
    p.add_argument("key")
    p.add_argument("local_path", nargs="?")
    p.set_defaults(func=fetch)

    p = sub.add_parser("create", help="upload LOCAL_PATH or stdin as a key")
    p.add_argument("key")
    p.add_argument("local_path", nargs="?")
    p.add_argument("--class", dest="klass", default="", help="class to store the key in")
    p.set_defaults(func=create)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s:%(name)s:%(message)s")
    if not args.cmd:
        parser.print_help()
        return 2
    try:
        return args.func(args)
    except (TrackerFSError, ValueError) as e:
        print(f"error = {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
