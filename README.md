# ethkit

Tools for working with Ethereum contract data in Python:

- parse Solidity ABI type strings (`uint256`, `tuple(address a, bytes b)[]`, ...)
- encode and decode values in the contract ABI format
- load JSON or human-readable ABIs and work with their methods, events and errors
- parse event logs and encode or parse single topics
- unpack revert reasons
- compute Keccak-256 digests and ENS name hashes
- follow the chain head with reorg handling
- look up 4-byte selectors in the public 4byte directory
- generate random ABI types and values for testing encoders

## Installation

```
pip install ethkit
```

To run the test suite:

```
pip install "ethkit[test]"
pytest
```

## Types

`ethkit.abitype.new_type` parses a type string into a `Type`, whose `kind` is a
`Kind` member. `Type.format(include_args)` renders it back; `str(t)` leaves out
argument names. `new_type_from_argument` builds a type from an `ArgumentStr`,
which `ArgumentStr.from_dict` reads from one JSON ABI argument object.

```python
from ethkit.abitype import new_type

t = new_type("tuple(address a, uint256[] b)")
t.format(True)   # 'tuple(address a,uint256[] b)'
t.is_dynamic()   # True
```

## Encoding and decoding

```python
from ethkit.abitype import new_type
from ethkit.encoding import encode
from ethkit.decoding import decode

t = new_type("tuple(address a, uint256 b)")
data = encode({"a": "0xdbb881a51CD4023E4400CEF3ef73046743f08da3", "b": 50}, t)
values = decode(t, data)   # {'a': Address('0xdbb8...'), 'b': 50}
```

`encode` accepts:

- integers as `int`, `float` (truncated), or decimal or `0x` hex strings; negative values are
  written in two's complement
- addresses, `bytes` and fixed bytes as raw bytes or hex strings
- arrays and slices as lists or tuples
- tuples as a mapping keyed by element name (or by position as a string, `"0"`, `"1"`, ...
  for unnamed elements), a list, or a dataclass instance. Dataclass fields map to the name in
  their `abi` metadata, or else to the lower-cased field name; `abi="-"` skips a field.

`decode` returns `int` for all integer types, `Address` for addresses, `bytes` for byte types,
`str` for strings, lists for arrays and slices, and dicts for tuples keyed the same way.
`decode_struct(t, data, cls)` decodes a tuple straight into the dataclass `cls`.

`encode_hex` and `decode_hex` convert between bytes and `0x` hex strings.

## ABIs, methods, events and errors

```python
from ethkit.abi import new_abi_from_list

abi = new_abi_from_list([
    "function balanceOf(address owner) view returns (uint256 balance)",
    "event Transfer(address indexed from, address indexed to, uint256 value)",
])

method = abi.get_method("balanceOf")
method.sig()   # 'balanceOf(address)'
calldata = method.encode({"owner": "0xdbb881a51CD4023E4400CEF3ef73046743f08da3"})
```

`new_abi(text)` loads a JSON ABI. `new_method`, `new_event` and `new_error` build single
entries from their signatures, and `parse_method_signature` splits a function signature
into its name, input type and output type.

When several functions or events share a name, later ones are stored under `name0`,
`name1`, and so on. `ABI.get_method_by_signature` finds a method by its full signature.
`Method.id()` gives the 4-byte selector, `Method.decode` decodes call output, and
`Event.id()` gives the topic that identifies the event.

## Event logs

```python
event = abi.events["Transfer"]
if event.match(log):
    fields = event.parse_log(log)
```

`log` is an `ethkit.primitives.Log`. The functions in `ethkit.topics` work on the pieces
directly: `parse_log`, `parse_topics`, `parse_topic`, and `encode_topic` (bool, integer and
address types).

## Revert reasons

```python
from ethkit.decoding import unpack_revert_error

reason = unpack_revert_error(return_data)
```

## Primitives and ENS

`ethkit.primitives` holds the `Address` (20 bytes) and `Hash` (32 bytes) types, the `Log`
and `Block` dataclasses, `keccak256`, `hex_to_address`, and `name_hash`:

```python
from ethkit.primitives import name_hash

str(name_hash("foo.eth"))
# '0xde9b09fd7c5f901e23a3f19fecc54828e9c848539801e86591bd9801b019f84f'
```

## Block tracking

`ethkit.blocktracker.BlockTracker` keeps a bounded window of recent blocks, ten by default,
set through `Config.max_block_backlog`. It takes a provider: any object with
`get_block_by_number(number, full)` and `get_block_by_hash(block_hash, full)` methods that
return `Block` objects. It asks for the head with the number `"latest"`.

- `init()` fills the window by walking back from the latest block.
- `handle_reconcile(block)` merges a new head. It works out which blocks were added, and
  which were removed by a reorg, and backfills missing parents from the provider.
- `subscribe()` returns a `queue.Queue` of size one that receives `BlockEvent` objects; an
  event is dropped for a subscriber whose queue is still full.
- `start()` polls for new heads through the configured tracker, a `JSONBlockTracker` by
  default, which polls in a background thread. `close()` stops it.

## 4-byte signatures

`ethkit.fourbyte.resolve("0xddf252ad")` looks up a selector in the public 4byte directory and
returns its text signature, or an empty string when nothing is found. `resolve_bytes` takes
the selector as bytes. Both need network access.

## Random test data

`ethkit.randomgen` produces random type strings (`random_type`), random values for a type
(`generate_random_value`), and the source of a Solidity contract whose `set` function
returns its arguments unchanged (`generate_contract`). Each random function takes an
optional `random.Random` so that results can be repeated.

## What it does not do

ethkit includes no node client. It does not speak JSON-RPC, send transactions, call
contracts, or subscribe to new heads over a websocket. Block tracking needs a provider
object that you supply. There are no ready-made bindings for token or ENS registry contracts.
`name_hash` computes ENS hashes, but resolving names on chain is left to your own client.