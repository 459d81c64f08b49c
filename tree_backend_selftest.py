import json
import sys

import requests

BASE = "http://127.0.0.1:3000"   # 根据你实际情况改
TIMEOUT = 15


def show(step, resp):
    try:
        body = json.dumps(resp.json(), ensure_ascii=False, indent=2)
    except ValueError:
        body = resp.text
    print(f"\n--- {step}: HTTP {resp.status_code}")
    print(body)


def check_get_trees():
    print("\n[1] GET /api/tree")
    r = requests.get(f"{BASE}/api/tree", timeout=TIMEOUT)
    r.raise_for_status()
    data = r.json()
    show("forest", r)
    return data


def check_add_node(parent_id):
    print(f"\n[2] POST /api/tree under parent {parent_id}")
    r = requests.post(
        f"{BASE}/api/tree",
        json={"label": "selftest", "parentId": parent_id},
        timeout=TIMEOUT,
    )
    show("created", r)
    return r


def check_validation():
    print("\n[3] POST /api/tree with invalid bodies")
    for body in ({"parentId": 1}, {"label": "x", "parentId": "abc"}):
        r = requests.post(f"{BASE}/api/tree", json=body, timeout=TIMEOUT)
        show(f"body {body}", r)
        if r.status_code != 400:
            return False
    return True


if __name__ == "__main__":
    if len(sys.argv) > 1:
        BASE = sys.argv[1].rstrip("/")

    print("=== Tree service self-check ===")
    forest = check_get_trees()

    added = None
    if forest:
        added = check_add_node(forest[0]["id"])
    else:
        print("\n(forest is empty; POST should answer 404)")
        added = check_add_node(1)

    validation_ok = check_validation()

    print("\n=== Summary ===")
    print("GET /api/tree returned a list:", isinstance(forest, list))
    print("POST /api/tree status:", added.status_code if added is not None else None)
    print("validation answered 400:", validation_ok)
