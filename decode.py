"""
Order Trace Decoder - narrate the order-matching logs of a transaction or block range

Usage:
    python decode.py <txhash>
    python decode.py 0x6139dba1b74796d2fa1af26e70074a1e7b891a0170f7153dea95ac3db65daba6
    python decode.py <fromBlock> <toBlock>

Environment:
    RPC_URL         Node endpoint (default http://localhost:8551)
    RPC_TIMEOUT     HTTP timeout in seconds (default 30)
    DECODER_DEBUG   Set to 1 to write verbose decode logs to decoder_debug.log

Exit codes:
    0  finished (per-log or per-block problems are only reported)
    1  bad arguments, RPC unreachable, or no receipt for the requested tx
"""

import sys
from typing import Iterable, List, Optional

# Load environment
from dotenv import load_dotenv

from order_decoder.config.chain_config import TX_SEPARATOR
from order_decoder.logging_config import setup_logging
from order_decoder.services.decoders.base import InvalidInput, NarrationKind, NarrationRecord, ReceiptNotFound
from order_decoder.services.node_client import FETCH_ERRORS, NodeClient
from order_decoder.services.trace_walker import TraceWalker, validate_block_range, validate_tx_hash


def print_records(records: Iterable[NarrationRecord]):
    """Print log headers as `..log[i] (topic: X)` and their records indented beneath"""
    for record in records:
        if record.kind in (NarrationKind.NO_LOGS, NarrationKind.LOG_HEADER):
            print(f"..{record.message}")
        else:
            print(f"....{record.message}")


def _parse_block(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def run_single(walker: TraceWalker, tx_hash: str) -> int:
    try:
        records = walker.trace_transaction(tx_hash)
    except ReceiptNotFound as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    except FETCH_ERRORS as e:
        print(f"[!] Failed to fetch receipt for tx {tx_hash}: {e}", file=sys.stderr)
        return 1
    print_records(records)
    return 0


def run_range(walker: TraceWalker, from_block: int, to_block: int) -> int:
    print(f"Analyzing logs from block {from_block} to block {to_block}")
    for trace in walker.iter_range(from_block, to_block):
        print(f"Analyzing block {trace.block_number} tx[{trace.tx_index}]: {trace.tx_hash}")
        print_records(trace.records)
        print(TX_SEPARATOR)
    return 0


def main(argv: Optional[List[str]] = None, node: Optional[NodeClient] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    if len(args) not in (1, 2):
        print(__doc__, file=sys.stderr)
        return 1

    load_dotenv()
    setup_logging()

    # Validate before connecting
    try:
        if len(args) == 1:
            validate_tx_hash(args[0])
        else:
            validate_block_range(_parse_block(args[0]), _parse_block(args[1]))
    except InvalidInput as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1

    try:
        if node is None:
            node = NodeClient().connect()
    except ConnectionError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1

    walker = TraceWalker(node)
    try:
        if len(args) == 1:
            return run_single(walker, args[0])
        return run_range(walker, int(args[0]), int(args[1]))
    except KeyboardInterrupt:
        print("\n[!] Interrupted", file=sys.stderr)
        return 130


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
