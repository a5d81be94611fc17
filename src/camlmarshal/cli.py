from __future__ import annotations
import argparse, json, logging, sys

from .binary.errors import MarshalError
from .models.options import DecoderOptions


def _options(args) -> DecoderOptions:
    base = DecoderOptions.runtime_slots if args.runtime_slots else DecoderOptions
    return base(max_depth=args.max_depth, strict_counts=args.strict, runtime_layout=args.runtime_layout)


def _dump(header, value) -> dict:
    return {"header": header.model_dump(mode="json"), "value": value.model_dump(mode="json")}


def cmd_info(args):
    from .binary.reader import iter_values, read_header

    if not args.all:
        print(json.dumps(read_header(args.input).model_dump(mode="json"), indent=2))
        return 0

    out = [h.model_dump(mode="json") for h, _ in iter_values(args.input, _options(args))]
    print(json.dumps(out, indent=2))
    return 0


def cmd_to_json(args):
    from .binary.reader import decode_file, iter_values

    if args.all:
        doc = [_dump(h, v) for h, v in iter_values(args.input, _options(args))]
    else:
        doc = _dump(*decode_file(args.input, _options(args)))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as out:
            json.dump(doc, out, indent=2)
    else:
        print(json.dumps(doc, indent=2))
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="camlmarshal", description="OCaml marshaled-data reader")
    p.add_argument("-v", "--verbose", action="store_true", help="Log decoder progress to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    def common(sp):
        sp.add_argument("input", help="Path to a file written by output_value / Marshal")
        sp.add_argument("--all", action="store_true", help="Process every value in the file, not only the first")
        sp.add_argument("--max-depth", type=int, default=None, help="Reject values nested deeper than N blocks")
        sp.add_argument("--runtime-slots", action="store_true",
                        help="Use the runtime's slot rules (shared boxed floats, unshared atoms)")
        sp.add_argument("--runtime-layout", action="store_true",
                        help="Use the runtime's wire layout (packed block headers, size-coded nativeints)")
        sp.add_argument("--strict", action="store_true", help="Fail on header count mismatches instead of warning")

    sp = sub.add_parser("info", help="print the header(s) as JSON")
    common(sp)
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("to-json", help="decode to JSON")
    common(sp)
    sp.add_argument("output", nargs="?", default=None, help="Output file (default: stdout)")
    sp.set_defaults(func=cmd_to_json)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    if ns.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return ns.func(ns)
    except (MarshalError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
