# oceandoc

Utilities for a file-synchronisation server, each usable on its own.

| Module | What it offers |
| --- | --- |
| `oceandoc.timeutil` | millisecond and nanosecond clocks; `str_to_timestamp*` / `to_time_str*` to parse and format Unix milliseconds in UTC, the local zone or a named zone; `to_timespec`; `random_int` in `[start, end)`; `sleep_ms`; the `Timer` context manager, which logs how long a block took |
| `oceandoc.textutil` | ASCII case conversion, `trim`, `split` on any of several delimiter characters, `replace_all`, `to_int`, `to_hex` / `bytes_to_hex` / `hex_to_int`, base64, xz compression (`lzma_compress`, `lzma_decompress`), `new_uuid` |
| `oceandoc.pathutil` | `unify_dir`, `simplify_path`, `parent_path`, `relative` between paths, `repo_file_path` for content-addressed storage, `partition_count` and `partition_range` |
| `oceandoc.fsutil` | create, copy, rename, remove, truncate, `write_file` / `write_at` / `load_file`, sized files, symlink creation and syncing, and `file_info` returning a `FileInfo` (mtime in ms, size, owner and group names) |
| `oceandoc.hashing` | `crc32c`, `murmur_hash64a`, a pure-Python incremental `Blake3` hasher, MD5/SHA-256 and any `hashlib` digest of data or files, `generate_salt`, PBKDF2-HMAC-SHA256 `hash_password` / `verify_password` |
| `oceandoc.sysinfo` | open descriptor count, resident memory in MiB, local IP addresses, executable path, `home_dir`, `get_env`, `env_lines` |
| `oceandoc.config` | `ConfigManager`, which loads a JSON `BaseConfig` and keeps a persistent server UUID in `ServerMeta` (`<home>/data/server_meta.json`) |
| `oceandoc.thread_pool` | a process-wide `ThreadPool` whose size is the configuration's `event_threads` |
| `oceandoc.rows` | `UsersRow`, `MetaRow` and `FilesRow` records built from database result rows |

Functions raise ordinary Python exceptions (`OSError`, `ValueError`,
`lzma.LZMAError`, ...) when an operation fails.

## Installation

```
pip install .
```

## Examples

```python
from oceandoc import hashing, pathutil, timeutil

with timeutil.Timer() as timer:
    digest = hashing.sha256_hex(b"hello")
print(timer.cost_ms)

print(pathutil.repo_file_path("/data/repo/", digest))
print(pathutil.relative("/a/b/c", "/a/d"))  # "../b/c"
print(timeutil.to_time_str_utc(0))          # "1970-01-01T00:00:00.000+00:00"
```

Loading configuration and running work in the shared pool:

```python
from oceandoc.config import ConfigManager
from oceandoc.sysinfo import home_dir
from oceandoc.thread_pool import ThreadPool

home = home_dir()
config = ConfigManager.instance()
config.init(home, home + "/conf/server_base_config.json")
print(config.grpc_server_port, config.server_uuid)

pool = ThreadPool.instance()
pool.init(config)
future = pool.post(lambda a: a + 5, 6)
assert future.result() == 11
pool.stop()
```

Configuration files may spell field names as written (`grpc_server_port`) or
in lowerCamelCase (`grpcServerPort`); unknown fields are ignored.

## What it does not do

- It has no command-line program and no server; it is a library only.
- It does not open or manage a database. The `rows` module only turns rows
  that the caller has already fetched into records.
- The BLAKE3 hasher is written in pure Python and is slow on large files.

## Tests

```
pip install .[test]
pytest
```