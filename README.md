# ssrkit

Building blocks for a proxy server, each usable on its own:

- `ssrkit.jsonparser` – a byte-oriented JSON parser (`parse`, `parse_text`)
  that reports errors as `JsonParseError` with line and column, skips a UTF-8
  byte-order mark, accepts trailing commas and, with `enable_comments=True`,
  `//` and `/* */` comments. It returns a `ssrkit.jsonvalue.JsonValue` tree.
- `ssrkit.jsonvalue` – `JsonValue` and `JsonType`: lenient accessors
  (`[]`, `len`, `int`, `float`, `bool`, `str`, `items`, `to_python`).
- `ssrkit.jsonescape` – `hex_value`, `encode_uchar` and `decode_escape`, the
  helpers that decode string escapes.
- `ssrkit.netutils` – `validate_hostname`, the `SocketAddress` record,
  ordering with `sockaddr_cmp` / `sockaddr_cmp_addr`, blocking name
  resolution with `get_sockaddr`, and the socket helpers `bind_to_address`,
  `set_reuseport` and `set_interface`.
- `ssrkit.rule` – `Rule` and `RuleSet`: ordered regular-expression host rules.
- `ssrkit.resolv` – `Resolver`, an asynchronous resolver built on dnspython
  that queries A and AAAA records concurrently, and `choose_address` with
  its `ResolveMode` preferences.
- `ssrkit.obfs` – the `ServerInfo` record, the `XorShift128Plus` generator
  and `get_head_size` for address headers.
- `ssrkit.datalist` – `DataList`, a small ordered container with
  match-based search and removal and in-place selection sort.

## Installation

```
pip install ssrkit
```

## Parsing JSON

```python
from ssrkit.jsonparser import parse_text, JsonParseError

config = parse_text('{"server_port": 8388, /* note */ "timeout": 60}', enable_comments=True)
print(int(config["server_port"]))   # 8388
print(config.to_python())           # {'server_port': 8388, 'timeout': 60}

try:
    parse_text("[1, 2")
except JsonParseError as err:
    print(err.line, err.column, err)
```

Indexing a value that is not an object or array, or asking for a missing
key, yields an empty value of type `JsonType.NONE` rather than raising, so
lookups can be chained. Integers are 64-bit and wrap on overflow.

## Checking hostnames and addresses

```python
from ssrkit.netutils import validate_hostname, get_sockaddr, sockaddr_cmp

validate_hostname("example.com")      # True
validate_hostname("-bad-.example")    # False

first = get_sockaddr("127.0.0.1", "8388", block=False, ipv6first=False)
second = get_sockaddr("127.0.0.1", "8389", block=False, ipv6first=False)
sockaddr_cmp(first, second)           # -1
first.to_tuple()                      # ('127.0.0.1', 8388)
```

`get_sockaddr` converts IP literals directly and resolves names through the
system resolver; it raises `ResolveError` when nothing usable is found.

## Host rules

```python
from ssrkit.rule import Rule, RuleSet

rules = RuleSet()
rule = Rule()
rule.accept_arg(r"\.example\.com$")
rule.compile()
rules.add(rule)
rules.lookup("www.example.com")       # the rule
rules.lookup("example.org")           # None
```

A second `accept_arg` on the same rule, or a pattern that does not compile,
raises `RuleError`.

## Resolving names

```python
import asyncio
from ssrkit.resolv import Resolver

async def main():
    async with Resolver(nameservers=None, ipv6first=False) as resolver:
        address = await resolver.query("example.com", 443)
        print(address)   # a SocketAddress, or None if nothing was found

asyncio.run(main())
```

## Smaller helpers

```python
from ssrkit.datalist import DataList
from ssrkit.obfs import XorShift128Plus, get_head_size

items = DataList([3, 1, 2])
items.sort(lambda a, b: a > b)
list(items)                           # [1, 2, 3]

get_head_size(b"\x01\x7f\x00\x00\x01\x00\x50", 30)   # 7

rng = XorShift128Plus(seed=1)
rng.next()                            # a 64-bit integer
```

## What this package does not do

ssrkit provides parts, not a running proxy. It has no command-line program,
no listening server or connection relay, no ciphers, and no implementations
of protocol or obfuscation plugins; `ServerInfo` only carries the parameters
such plugins would use.

## Running the tests

```
pip install -e ".[test]"
pytest
```