import hashlib

CHUNK_SIZE = 1024 * 1024


def sha256_file(file_path) -> bytes:
    """Return the SHA-256 digest of a file, read in chunks."""
    h = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            h.update(chunk)
    return h.digest()
