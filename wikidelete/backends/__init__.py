from wikidelete.backends.memory import MemoryWiki
from wikidelete.backends.wikijs import WikiJSBackend
from wikidelete.core.deletion_log import DeletionLog
from wikidelete.core.settings import Settings


def build_backend(settings: Settings, log: DeletionLog | None = None):
    if settings.backend == "wikijs":
        return WikiJSBackend.from_env(log=log)
    if settings.seed_file:
        return MemoryWiki.from_seed_file(settings.seed_file, log=log, watch_deletions=settings.watch_deletions)
    return MemoryWiki(log=log, watch_deletions=settings.watch_deletions)


__all__ = ["MemoryWiki", "WikiJSBackend", "build_backend"]
