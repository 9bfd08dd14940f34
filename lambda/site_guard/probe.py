import json
import ssl
import urllib.request


def is_up(url, timeout):
    """True iff a GET on ``url`` answers 2xx within ``timeout`` seconds.

    Any failure (DNS, connect, TLS, timeout, 4xx/5xx) counts as down.
    """
    try:
        ctx = ssl.create_default_context()
        with urllib.request.urlopen(url, timeout=timeout, context=ctx) as r:
            up = 200 <= r.status < 300
            if not up:
                print(json.dumps({"stage": "probe_bad_status", "url": url, "status": r.status}))
            return up
    except Exception as e:
        print(json.dumps({"stage": "probe_failed", "url": url, "error": str(e)}))
        return False
