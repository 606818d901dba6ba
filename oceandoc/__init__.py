"""Server utilities: time, text, paths, files, hashing, system info, configuration, a thread pool and table rows."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "fsutil",
    "hashing",
    "pathutil",
    "rows",
    "sysinfo",
    "textutil",
    "thread_pool",
    "timeutil",
]