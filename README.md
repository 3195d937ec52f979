# ckman

Helpers for tools that manage ClickHouse clusters. This is a library to
import; it has no command-line entry point.

## Modules

| Module | Purpose |
| --- | --- |
| `ckman.aes` | `aes_encrypt_ecb` / `aes_decrypt_ecb`: AES-128-ECB with a fixed built-in key, hex output, compatible with MySQL-style `aes_encrypt` / `aes_decrypt` |
| `ckman.gosypt` | `Gosypt` decrypts `ENC(...)`-wrapped strings inside strings, lists, tuples, dicts, dataclasses and plain objects; `GSYPT` is a ready instance |
| `ckman.iprange` | `parse_ip_range`, `parse_hosts`, `inet_aton`, `inet_ntoa`: expand `a-b` IPv4 ranges and CIDR blocks |
| `ckman.mathutil` | `max_int`, `decimal`, `array_search`, `md5_checksum` and the `Map` dict with `union`, `intersect`, `difference` |
| `ckman.util` | Password policy (`verify_password`) and bcrypt hashing, environment lookups (`env_string`, `env_int`, `env_bool`), `convert_disk`, `convert_duration`, temp files, `shuffle` and more |
| `ckman.configparams` | `ConfigParams`: register `Parameter` descriptions on fields of annotated classes, render a front-end schema as JSON, and marshal, unmarshal and compare the registered fields |
| `ckman.rsa` | `RSAEncryption`: encrypt with an RSA private key (PKCS#1 v1.5 type 1 padding) and decrypt with the public key, keys given as bare base64 |
| `ckman.token` | `JWT` and `CustomClaims`: HS256 tokens carrying a name and client address; `parse_token` raises `TokenInvalidError` |
| `ckman.workerpool` | `WorkerPool`: a thread pool whose `submit` blocks while its queue is full |
| `ckman.xmlfile` | `XMLFile`: build indented XML text and write it to a file; `merge` turns `a/b/c` keys into nested elements |
| `ckman.settings` | `parse_config_file` and `CKManConfig`: load the YAML service configuration over defaults and save it back |

## Examples

Expanding host lists:

```python
from ckman.iprange import parse_hosts, parse_ip_range

parse_ip_range("192.168.1.0/31")
# ['192.168.1.0', '192.168.1.1']

parse_hosts(["10.0.0.1-10.0.0.3", "10.0.1.9"])
# ['10.0.0.1', '10.0.0.2', '10.0.0.3', '10.0.1.9']
```

Invalid ranges raise `ValueError`.

Encrypting a value and reading it back through `ENC(...)`:

```python
from ckman.aes import aes_encrypt_ecb
from ckman.gosypt import GSYPT

wrapped = f"ENC({aes_encrypt_ecb('hello')})"
GSYPT.ensure_password(wrapped)   # 'hello'
GSYPT.ensure_password("plain")   # 'plain'
```

Human-readable sizes:

```python
from ckman.util import convert_disk

convert_disk(49367)   # '48.21KB'
```

Combining maps:

```python
from ckman.mathutil import Map

left = Map({"a": 1, "b": 2})
right = Map({"b": 20, "c": 3})
left.union(right)       # {'b': 2, 'c': 3, 'a': 1}  (left wins on conflicts)
left.intersect(right)   # {'b': 2}
left.difference(right)  # {'a': 1}
```

Writing a ClickHouse XML file:

```python
from ckman.xmlfile import XMLFile

xml = XMLFile("macros.xml")
xml.begin("yandex")
xml.comment("macros configuration")
xml.begin("macros")
xml.write("shard", 3)
xml.write("replica", "replica-1")
xml.end("macros")
xml.merge({"volumes/disk": ["hdfs1", "local"]})
xml.end("yandex")
xml.dump()
```

`dump` raises `ValueError` if the name or the accumulated text is empty.

Running work on a pool:

```python
from ckman.workerpool import WorkerPool

pool = WorkerPool(3, 1)
results = []
for name in ["alpha", "beta", "gamma"]:
    pool.submit(lambda name=name: results.append(name))
pool.stop_wait()   # further submit() calls raise WorkerPoolStopped
pool.restart()
```

Loading the service configuration:

```python
from ckman.settings import parse_config_file

config = parse_config_file("conf/ckman.yaml", "v1.0.0")
config.server.port          # 8808 unless the file overrides it
config.work_directory()     # parent of the directory holding the file
config.save()               # writes the YAML back to the same file
```

## What this package does not do

It provides building blocks only. It does not run a web server or API, does
not connect to ClickHouse, ZooKeeper or remote hosts over SSH, does not edit
hosts files, and does not scan or list installation packages. There is no
command to run.

## Running the tests

Install the `test` extra and run `pytest` from the project root.