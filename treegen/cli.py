#!/usr/bin/env python3
"""
treegen: resolve the snapshot boundary of a rewards interval, and optionally
regenerate its tree through an external tree engine.

Usage:
    treegen --finalized-only -b http://localhost:5052
    treegen --network-info --state-reader mypkg.rewards:make_reader
    treegen -i 12 --state-reader mypkg.rewards:make_reader --tree-engine mypkg.tree:make_engine
    treegen -i 12 -t 210000 --state-reader mypkg.rewards:make_reader
"""

import argparse
import importlib
import json
import logging
import sys

from .beacon import BeaconNodeClient
from .config import Settings
from .epoch_slot_utils import EpochTimeConverter
from .errors import TreegenError
from .generator import TreeGenerator
from .networks import identify_network
from .slot_locator import FinalizedSlotLocator

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_factory(path: str):
    """Resolve a 'package.module:callable' path."""
    module_name, sep, attr = path.partition(":")
    if not sep or not attr:
        raise ValueError(f"expected 'module:callable', got '{path}'")
    return getattr(importlib.import_module(module_name), attr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve rewards interval snapshot boundaries and regenerate past trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-i", "--interval", type=int, default=-1,
                       help="Rewards interval to generate. -1 means a dry run for the current interval, "
                            "using the latest finalized block as the interval end.")
    parser.add_argument("-t", "--target-epoch", type=int, default=None,
                       help="Override the last epoch of the interval, current or past. "
                            "With -i, the epoch must be part of that interval.")
    parser.add_argument("-e", "--ec-endpoint", default=None,
                       help="Execution client JSON-RPC URL (an archive node for past intervals)")
    parser.add_argument("-b", "--bn-endpoint", action="append", default=None,
                       help="Beacon node REST URL; repeat to add fallback providers")
    parser.add_argument("-n", "--network-info", action="store_true",
                       help="Print the network and current interval details, then exit")
    parser.add_argument("--finalized-only", action="store_true",
                       help="Print the latest finalized slot (or the target epoch's last proposed slot), then exit")
    parser.add_argument("--state-reader", default=None,
                       help="'module:factory' returning the rewards contract state reader")
    parser.add_argument("--state-manager", default=None,
                       help="'module:factory' returning the network state manager")
    parser.add_argument("--tree-engine", default=None,
                       help="'module:factory' returning the tree construction engine")
    parser.add_argument("--max-concurrent-ec-requests", type=int, default=None,
                       help="Connection pool size for the execution client")
    parser.add_argument("-o", "--output", default=None,
                       help="Output file path for the JSON report (default: stdout)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def settings_from_args(args) -> Settings:
    settings = Settings.from_env()
    if args.ec_endpoint:
        settings.ec_endpoint = args.ec_endpoint
    if args.bn_endpoint:
        settings.bn_endpoints = args.bn_endpoint
    if args.max_concurrent_ec_requests:
        settings.max_concurrent_ec_requests = args.max_concurrent_ec_requests
    return settings


def finalized_only(settings: Settings, target_epoch) -> dict:
    bn = BeaconNodeClient(settings.bn_endpoints, max_retries=settings.max_retries, timeout=settings.request_timeout)
    cfg = bn.get_chain_config()
    network = identify_network(cfg.chain_id)
    converter = EpochTimeConverter.from_chain_config(cfg)
    located = FinalizedSlotLocator(bn, converter).latest_finalized(target_epoch)
    return {
        "network": network.name,
        "slot": located.slot,
        "epoch": converter.slot_to_epoch(located.slot),
        "execution_block_number": located.execution_block_number,
        "slot_time": located.slot_time,
    }


def _emit(payload: dict, output) -> None:
    output_json = json.dumps(payload, indent=2)
    if output:
        with open(output, "w") as f:
            f.write(output_json)
        print(f"\nReport saved to {output}", file=sys.stderr)
    else:
        print(output_json)


def _print_summary(coordinate: dict, extra: dict) -> None:
    print("\n" + "=" * 70, file=sys.stderr)
    print(f"Interval index:       {coordinate['interval_index']}", file=sys.stderr)
    print(f"Start time:           {coordinate['start_time']}", file=sys.stderr)
    print(f"End time:             {coordinate['end_time']}", file=sys.stderr)
    print(f"Snapshot beacon slot: {coordinate['consensus_block']}", file=sys.stderr)
    print(f"Snapshot EL block:    {coordinate['execution_header']['number']}", file=sys.stderr)
    print(f"Intervals passed:     {coordinate['intervals_elapsed']}", file=sys.stderr)
    for label, value in extra.items():
        if value is not None:
            print(f"{label + ':':22s}{value}", file=sys.stderr)
    print("=" * 70, file=sys.stderr)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    settings = settings_from_args(args)

    try:
        if args.finalized_only:
            _emit(finalized_only(settings, args.target_epoch), args.output)
            return 0

        if not args.state_reader:
            parser.error("--state-reader is required unless --finalized-only is given")

        state_reader = load_factory(args.state_reader)(settings)
        state_manager = load_factory(args.state_manager)(settings) if args.state_manager else None
        tree_engine = load_factory(args.tree_engine)(settings) if args.tree_engine else None
        generator = TreeGenerator.connect(settings, state_reader, state_manager, tree_engine)

        if args.network_info:
            info = generator.network_info()
            payload = {"network": generator.network.name, **info.to_dict()}
            _emit(payload, args.output)
            _print_summary(payload["coordinate"], {
                "Network": generator.network.name,
                "Start beacon slot": info.start_slot,
                "Start EL block": info.start_el_block,
            })
            return 0

        if args.interval < 0:
            report = generator.generate_current(args.target_epoch)
        else:
            report = generator.generate_past(args.interval, args.target_epoch)
    except TreegenError as e:
        print(f"Error generating tree: {e}", file=sys.stderr)
        return 1

    payload = report.to_dict()
    _emit(payload, args.output)
    validation = report.root_validation
    _print_summary(payload["coordinate"], {
        "Network": report.network,
        "Target epoch": report.target_epoch,
        "Merkle root": report.merkle_root,
        "Canonical root": validation.canonical_root if validation else None,
        "Root matches": validation.matches if validation and validation.checked else None,
    })
    return 1 if report.root_mismatch else 0


if __name__ == "__main__":
    sys.exit(main())
