class KoiroError(RuntimeError):
    pass


class DocumentDecodeError(KoiroError, ValueError):
    pass


class SongNotFound(KoiroError, LookupError):
    pass
