"""Convert a PO file into the compiled catalog JSON consumed by CatalogLibrary.set_catalog."""

from __future__ import annotations
import argparse
import json
import sys
from typing import Optional, Sequence

from parsing.errors import ParsingError
from parsing.plural_rule import parse_plural_forms
from parsing.po_parser import parse_catalog


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Convert a PO catalog to JSON")
    p.add_argument("file", help="PO file to convert")
    p.add_argument("--sparse", action="store_true", help="Omit meta data (runtime form)")
    p.add_argument("--indent", type=int, default=None, help="Pretty-print with this indent")
    p.add_argument("--output", type=str, help="Write JSON here instead of stdout")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        with open(args.file, "r", encoding="utf-8") as fh:
            source = fh.read()
        data = parse_catalog(source, sparse=args.sparse)
        # reject catalogs whose plural rule would fail at install time
        parse_plural_forms(data.plural)
    except (OSError, ParsingError) as e:
        print(f"{args.file}: {e}", file=sys.stderr)
        return 1
    payload = json.dumps(data.to_dict(), indent=args.indent, ensure_ascii=False)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(payload + "\n")
    else:
        print(payload)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
