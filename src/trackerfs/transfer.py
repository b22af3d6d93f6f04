from requests.utils import super_len

CHUNK_SIZE = 64 * 1024


class CountingReader:
    """Wraps a binary source and counts the bytes actually read from it.

    requests sends it with a Content-Length when the size of the source can
    be determined up front, and chunked otherwise.
    """

    def __init__(self, source, chunk_size=CHUNK_SIZE):
        self._source = source
        self._chunk_size = chunk_size
        self.nbytes = 0
        size = super_len(source)
        if size:
            self.len = size

    def read(self, size=-1):
        data = self._source.read(size)
        self.nbytes += len(data)
        return data

    def __iter__(self):
        while True:
            chunk = self.read(self._chunk_size)
            if not chunk:
                break
            yield chunk
