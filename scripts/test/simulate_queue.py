# scripts/test/simulate_queue.py
"""
Drive the queue API from the command line.
Usage: python scripts/test/simulate_queue.py register --plate ABC1234 --name Alice --phone 11999990000
       python scripts/test/simulate_queue.py call-next
       python scripts/test/simulate_queue.py recall --id 3
       python scripts/test/simulate_queue.py fill --count 5
"""

import argparse
import requests

BACKEND_URL = "http://localhost:8080/api/v1"


def _headers(api_key):
    return {"X-API-Key": api_key} if api_key else {}


def _show(label, resp):
    mark = "✅" if resp.status_code < 400 else "❌"
    print(f"{mark} {label} → HTTP {resp.status_code}: {resp.json()}")


def register(plate, name, phone):
    resp = requests.post(f"{BACKEND_URL}/drivers",
                         json={"plate": plate, "name": name, "phone_number": phone}, timeout=10)
    _show(f"register {plate}", resp)


def fill(count):
    """Register `count` fake drivers with sequential plates."""
    for i in range(count):
        register(f"TST{1000 + i}", f"Test Driver {i + 1}", f"119{i:08d}")


def call_next(api_key):
    resp = requests.post(f"{BACKEND_URL}/admin/call-next", headers=_headers(api_key), timeout=30)
    _show("call-next", resp)


def recall(entry_id, api_key):
    resp = requests.post(f"{BACKEND_URL}/admin/drivers/{entry_id}/recall", headers=_headers(api_key), timeout=30)
    _show(f"recall {entry_id}", resp)


def show_queue(api_key):
    resp = requests.get(f"{BACKEND_URL}/admin/queue", headers=_headers(api_key), timeout=10)
    print(f"📋 Waiting ({len(resp.json())}):")
    for d in resp.json():
        print(f"   #{d['id']:<4} {d['plate']:<10} {d['name']:<25} {d['entry_time']}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate queue activity for testing")
    parser.add_argument("action", choices=["register", "fill", "call-next", "recall", "queue"])
    parser.add_argument("--plate", default="ABC1234")
    parser.add_argument("--name", default="Test Driver")
    parser.add_argument("--phone", default="11999990000")
    parser.add_argument("--id", type=int)
    parser.add_argument("--count", type=int, default=3)
    parser.add_argument("--api-key", default=None)
    args = parser.parse_args()

    if args.action == "register":
        register(args.plate, args.name, args.phone)
    elif args.action == "fill":
        fill(args.count)
    elif args.action == "call-next":
        call_next(args.api_key)
    elif args.action == "recall":
        if args.id is None:
            parser.error("recall requires --id")
        recall(args.id, args.api_key)
    else:
        show_queue(args.api_key)
