from __future__ import annotations

import argparse
import concurrent.futures as _fut
import json as _json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from loaf import __version__
from loaf.envelope import is_envelope
from loaf.errors import LoafError
from loaf.pathutil import member_path
from loaf.pipeline import create, extract, verify
from loaf.render import describe_blobs
from loaf.source import BytesSource, FileSource, InputSource, TextSource


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger("loaf")
    root.handlers.clear()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(RichHandler(console=Console(stderr=True), show_path=verbose))
    root.propagate = False


def _read_envelope_text(path: str) -> str:
    """Read candidate envelope text from a file, or stdin for ``-``."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8", errors="replace")


def _next_nonconflicting_path(path: str) -> str:
    if not os.path.lexists(path):
        return path
    base_dir = os.path.dirname(path)
    root, ext = os.path.splitext(os.path.basename(path))
    i = 1
    while True:
        candidate = os.path.join(base_dir, f"{root} ({i}){ext}")
        if not os.path.lexists(candidate):
            return candidate
        i += 1


def cmd_create(
    input_path: Optional[str] = None,
    *,
    text: Optional[str] = None,
    output: Optional[str] = None,
) -> bool:
    """Create an envelope from a file, stdin, or literal text.

    Args:
        input_path: File to pack; ``-`` or None reads stdin (stored as ``-``).
        text: Literal text to pack instead of a file; stored as ``-``.
        output: Write the envelope here instead of stdout.

    Raises:
        RuntimeError: If the envelope could not be produced.
        ValueError: If both a file and text are given.
    """
    if text is not None and input_path is not None:
        raise ValueError("Pass either an input file or text, not both")
    source: InputSource
    if text is not None:
        source = TextSource(text)
    elif input_path in (None, "-"):
        source = BytesSource(sys.stdin.buffer.read())
    else:
        if not os.path.isfile(input_path):
            raise FileNotFoundError(f"No such file: {input_path}")
        source = FileSource(input_path)
    result = create(source)
    if not result.succeeded:
        raise RuntimeError("Failed to create .loaf archive")
    if output:
        Path(output).write_text(result.payload, encoding="ascii")
        print(f"Wrote {output} ({len(result.payload)} chars)")
    else:
        print(result.payload)
    return True


def _verify_one(path: str) -> Dict[str, Any]:
    res: Dict[str, Any] = {"path": path, "status": "unknown"}
    try:
        content = _read_envelope_text(path)
    except OSError as exc:
        res["status"] = "error"
        res["message"] = str(exc)
        return res
    result = verify(content)
    if not result.succeeded:
        res["status"] = "error"
        res["message"] = "not a .loaf envelope"
    else:
        res["status"] = "ok" if result.payload else "fail"
    return res


def cmd_verify(paths: List[str], *, jobs: int = 4, as_json: bool = False) -> bool:
    """Verify the embedded checksum of one or more envelopes.

    Args:
        paths: Envelope files; ``-`` reads stdin.
        jobs: Maximum parallel workers.
        as_json: When True, print a JSON result summary.

    Returns:
        True when every envelope verified, False otherwise.
    """
    results: List[Dict[str, Any]] = []
    with _fut.ThreadPoolExecutor(max_workers=max(1, int(jobs))) as ex:
        for r in ex.map(_verify_one, paths):
            results.append(r)
    ok = sum(1 for r in results if r["status"] == "ok")
    failed = len(results) - ok
    if as_json:
        print(_json.dumps({"results": results, "ok": ok, "failed": failed}))
    elif len(results) == 1:
        print("OK" if ok else "FAIL")
    else:
        for r in results:
            print(f"{r['status'].upper():6s} {r['path']}")
        print(f"Summary: ok={ok} failed={failed}")
    return failed == 0


def cmd_extract(path: str, *, outdir: Optional[str] = None, exists: str = "rename") -> bool:
    """Extract the blobs of an envelope.

    Args:
        path: Envelope file; ``-`` reads stdin.
        outdir: When given, write each blob below this directory; otherwise
            print a summary of the contents.
        exists: Policy when a destination exists: overwrite, skip, rename, fail.

    Raises:
        RuntimeError: If the envelope could not be decoded.
    """
    result = extract(_read_envelope_text(path))
    if not result.succeeded:
        raise RuntimeError("Failed to extract .loaf archive")
    if outdir is None:
        print(describe_blobs(result.payload))
        return True
    for blob in result.payload:
        dst = os.path.join(outdir, *member_path(blob.name).split("/"))
        if os.path.lexists(dst):
            if exists == "overwrite":
                if os.path.isdir(dst):
                    raise RuntimeError(f"Cannot overwrite directory with file: {dst}")
            elif exists == "skip":
                print(f"    skipping: {blob.name} (exists)")
                continue
            elif exists == "rename":
                dst = _next_nonconflicting_path(dst)
            else:
                raise RuntimeError(f"Destination exists: {dst}")
        os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
        with open(dst, "wb") as wf:
            wf.write(blob.data)
        print(f" extracted: {blob.name} -> {dst} ({blob.size} bytes)")
    return True


def cmd_detect(path: str) -> bool:
    """Report whether the text in ``path`` looks like a .loaf envelope."""
    found = is_envelope(_read_envelope_text(path))
    print("loaf" if found else "unknown")
    return found


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="loaf",
        description="Single-line .loaf archive tool (tar + gzip + hex + SHA256)",
        epilog="Envelope format: SHA256(-)=<64 hex digest> <hex payload>",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_create = sub.add_parser("create", help="Create an envelope")
    ap_create.add_argument("input", nargs="?", help="Input file (default/-: stdin)")
    ap_create.add_argument("--text", help="Pack this literal text instead of a file")
    ap_create.add_argument("--output", "-o", help="Write the envelope to this path")

    ap_verify = sub.add_parser("verify", help="Verify envelope checksums")
    ap_verify.add_argument("paths", nargs="+", help="Envelope files (-: stdin)")
    ap_verify.add_argument("--jobs", "-j", type=int, default=4, help="Parallel jobs (default 4)")
    ap_verify.add_argument("--json", action="store_true", help="Emit JSON result summary")

    ap_extract = sub.add_parser("extract", help="Extract envelope contents")
    ap_extract.add_argument("path", help="Envelope file (-: stdin)")
    ap_extract.add_argument("--outdir", help="Write blobs here instead of printing a summary")
    ap_extract.add_argument(
        "--exists",
        choices=["overwrite", "skip", "rename", "fail"],
        default="rename",
        help="What to do if a destination file exists (default: rename)",
    )

    ap_detect = sub.add_parser("detect", help="Check whether a file holds a .loaf envelope")
    ap_detect.add_argument("path", help="Candidate file (-: stdin)")

    args = ap.parse_args(argv)
    if args.cmd == "create" and args.text is not None and args.input is not None:
        ap_create.error("INPUT and --text cannot be combined")
    _configure_logging(args.verbose)
    try:
        if args.cmd == "create":
            cmd_create(args.input, text=args.text, output=args.output)
        elif args.cmd == "verify":
            success = cmd_verify(args.paths, jobs=args.jobs, as_json=args.json)
            sys.exit(0 if success else 1)
        elif args.cmd == "extract":
            cmd_extract(args.path, outdir=args.outdir, exists=args.exists)
        elif args.cmd == "detect":
            sys.exit(0 if cmd_detect(args.path) else 1)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (LoafError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
