# blockrest

This package provides the parts a block explorer REST API is built from. It
parses and classifies scripts, encodes addresses, keeps a chain of block
headers and handles transactions. It computes fees, produces JSON views of
chain data and builds HTTP responses and errors. It needs only the Python
standard library.

## Modules

- `blockrest.hashing`: `sha256d`, `full_hash`, and `hash_to_hex` and
  `hex_to_hash`, which convert between raw 32-byte hashes and the usual
  byte-reversed hex form. It also has two small helpers: `spawn_thread`, which
  starts a named thread, and `create_socket`, which creates a TCP socket bound
  to an address with port reuse turned on where the platform supports it.
- `blockrest.script`: `Script`, a `bytes` subclass. Its predicates are
  `is_p2pkh`, `is_p2sh`, `is_p2wpkh`, `is_p2wsh`, `is_p2tr`, `is_op_return`,
  `is_provably_unspendable` and a few more. It also has `instructions()`,
  `to_asm()` and `script_type()`.
- `blockrest.address`: `Network` (`BITCOIN`, `TESTNET`, `SIGNET`, `REGTEST`)
  and the address codecs `base58check_encode`/`base58check_decode` and
  `bech32_encode`/`bech32_decode`. Version 0 programs use bech32 and later
  versions use bech32m. `script_to_address` and `address_to_script` convert
  between scripts and addresses. Both raise `AddressError` on bad input, and
  `address_to_script` also raises it when the address belongs to a different
  network.
- `blockrest.block`: `BlockHeader` parses, serializes and hashes headers and
  gives their `difficulty()`. The module also has `BlockId` and `HeaderEntry`,
  and `HeaderList`, which holds the best chain of headers:
  - `build` links headers back from a tip.
  - `order` and `apply` add new headers, replacing any reorganised part of the
    chain.
  - Headers can be looked up by hash or by height.
  - `get_mtp` gives the median time past.

  `BlockStatus` and `BlockMeta` are here too; `BlockMeta.parse_getblock` reads
  `nTx`, `size` and `weight`.
- `blockrest.transaction`: `OutPoint`, `TxIn`, `TxOut` and `Transaction`.
  `Transaction` parses and serializes segwit and legacy data and gives
  `txid()`, `weight()`, `total_size()` and `is_coinbase()`. The helpers are
  `has_prevout`, `is_coinbase`, `is_spendable`, `extract_tx_prevouts`,
  `serialize_outpoint` and `get_innerscripts`. `get_innerscripts` finds the
  redeemScript of a p2sh spend and the witnessScript of a p2wsh spend.
  `TransactionStatus` is also here.
- `blockrest.fees`: `get_tx_fee`, `TxFeeInfo.from_transaction` and
  `make_fee_histogram`.
- `blockrest.values`: JSON views with a `to_dict()` method. They are
  `BlockValue`, `TransactionValue`, `TxInValue`, `TxOutValue`, `UtxoValue` and
  `SpendingValue`.
- `blockrest.responses`: `Response`, `HttpError`, `http_message`,
  `json_response`, `ttl_by_depth`, `parse_scripthash`, `address_to_scripthash`
  and `to_scripthash`. `HttpError` uses status 400 by default, and
  `HttpError.not_found` uses 404.
- `blockrest.signals`: `Waiter` and `Interrupted`.

## Scripts and addresses

```python
from blockrest.address import Network, address_to_script, script_to_address
from blockrest.script import Script

script = Script.from_hex("76a914" + "00" * 20 + "88ac")
script.script_type()   # "p2pkh"
script.to_asm()        # "OP_DUP OP_HASH160 OP_PUSHBYTES_20 0000... OP_EQUALVERIFY OP_CHECKSIG"

address = script_to_address(script, Network.BITCOIN)
address_to_script(address, Network.BITCOIN) == script   # True
```

`script_to_address` returns `None` for a script that has no address, such as
an OP_RETURN output.

## Transactions and JSON views

```python
from blockrest.hashing import hash_to_hex
from blockrest.transaction import Transaction
from blockrest.values import TransactionValue
from blockrest.address import Network

tx = Transaction.parse(raw_bytes)
hash_to_hex(tx.txid())
view = TransactionValue.build(tx, None, known_outputs, Network.BITCOIN)
view.to_dict()   # txid, version, locktime, vin, vout, size, weight, fee, status
```

`known_outputs` maps each `OutPoint` to the `TxOut` it names. It supplies the
prevouts from which the fee and the inner scripts are worked out. The view
leaves out inputs whose prevout is not in the mapping.

## Fee histograms

`make_fee_histogram` takes `TxFeeInfo` entries and returns `(fee_rate, vsize)`
pairs, starting with the highest fee rate. Once the current bin holds more
than 50,000 vbytes, the next entry with a different fee rate starts a new bin.

## Responses and caching

`http_message` builds a plain-text `Response` and `json_response` builds a
compact JSON `Response`. `json_response` serializes objects through their
`to_dict()` method. Both set `Cache-Control: public, max-age=<ttl>`.
`ttl_by_depth` picks the ttl:

```python
from blockrest.responses import ttl_by_depth

ttl_by_depth(None, 800_000)      # 10: unconfirmed
ttl_by_depth(700_000, 800_000)   # 157784630: at least 10 blocks deep
```

`to_scripthash("address", ...)` returns the SHA-256 of the output script the
address pays to. `to_scripthash("scripthash", ...)` parses 64 hex digits. Both
raise `HttpError` with status 400 on bad input.

## Signals

`Waiter.start()` installs handlers for SIGINT, SIGTERM and SIGUSR1. Calling
`Waiter.wait(duration, accept_sigusr)` sleeps for `duration`. It returns early
on SIGUSR1 if `accept_sigusr` is true and ignores SIGUSR1 otherwise. It raises
`Interrupted` on any other signal. `Waiter.notify(signum)` delivers a signal
by hand.

## What this package does not do

The package has no HTTP server and no request routing. Nothing maps URL paths
to endpoints or listens for connections. It has no chain index or mempool
storage, and it does not talk to a node. It does not compute merkle proofs.
Serving an API is up to the caller: route requests, query your own data
source, and use the views and response helpers here to build the replies.