import argparse
import json
import os
import sys

import httpx

from config import Config

# Every valid mirror is listed under each category.
CATEGORIES = ("video", "search", "channel", "playlist", "comments")
DEFAULT_CANDIDATES = ("https://invidious.lunivers.trade", "https://yewtu.be")


def read_candidates(path):
    """
    Reads one mirror URL per line, creating the file with defaults if it is missing.
    """
    if not os.path.exists(path):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(DEFAULT_CANDIDATES))

    with open(path, "r", encoding="utf-8") as f:
        return [line.strip().rstrip("/") for line in f if line.strip()]


def check_mirror(client, url):
    """
    A mirror is valid when its stats endpoint answers 200 with a JSON body.
    Returns (is_valid, message).
    """
    try:
        resp = client.get(f"{url}/api/v1/stats")
    except httpx.HTTPError as e:
        return False, f"ERROR: {e}"
    if resp.status_code != 200:
        return False, "FAILED"
    try:
        if resp.json() is None:
            return False, "FAILED"
    except ValueError:
        return False, "FAILED"
    return True, "SUCCESS"


def validate(candidates, timeout, transport=None):
    valid = {category: [] for category in CATEGORIES}
    with httpx.Client(timeout=timeout, transport=transport) as client:
        for url in candidates:
            print(f"Checking {url}...")
            ok, message = check_mirror(client, url)
            print(f"  -> {message}")
            if ok:
                for category in CATEGORIES:
                    valid[category].append(url)
    return valid


def main(argv=None):
    config = Config()
    parser = argparse.ArgumentParser(description="Check which Invidious mirrors are reachable.")
    parser.add_argument("--candidates", default=config.CANDIDATES_FILENAME,
                        help=f"File with one mirror URL per line (default: {config.CANDIDATES_FILENAME}).")
    parser.add_argument("--output", default=config.VALID_FILENAME,
                        help=f"Where to write the valid mirrors (default: {config.VALID_FILENAME}).")
    parser.add_argument("-t", "--timeout", type=float, default=config.VALIDATE_TIMEOUT,
                        help=f"Per-mirror timeout in seconds (default: {config.VALIDATE_TIMEOUT}).")

    args = parser.parse_args(argv)

    print("Starting Validation...")
    try:
        candidates = read_candidates(args.candidates)
    except OSError as e:
        print(f"Could not read candidates: {e}", file=sys.stderr)
        return 1

    valid = validate(candidates, args.timeout)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(valid, f, indent=2)
    print(f"Saved valid instances to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
