import json
import logging
import os
import ssl
import urllib.request

import certifi

logger = logging.getLogger(__name__)


def _env_enabled(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes"}


def send_slack_alert_if_needed(
    disk_percent: float,
    memory_percent: float,
    blob_store_name: str,
    process_rss_mb: int | None = None,
) -> tuple[bool, int | None]:
    """Send a Slack alert via webhook if configured and the blob disk is filling up.

    Returns a tuple: (attempted, status_code). If not attempted, status_code is None.
    """
    alerts_enabled = _env_enabled("FILEDROP_SLACK_ALERTS_ENABLED")
    webhook_url = os.environ.get("FILEDROP_SLACK_WEBHOOK_URL")
    threshold_pct_str = os.environ.get("FILEDROP_SLACK_DISK_THRESHOLD", "90")
    try:
        threshold_pct = float(threshold_pct_str)
    except ValueError:
        threshold_pct = 90.0

    should_alert = alerts_enabled and bool(webhook_url) and (disk_percent >= threshold_pct)
    logger.debug(
        f"[Slack] enabled={alerts_enabled} disk={disk_percent:.1f}% "
        f"threshold={threshold_pct:.1f}% has_webhook={'yes' if webhook_url else 'no'}"
    )

    if not should_alert:
        return False, None

    if _env_enabled("FILEDROP_SLACK_VERIFY_SSL", "true"):
        ssl_ctx = ssl.create_default_context(cafile=certifi.where())
    else:
        ssl_ctx = ssl._create_unverified_context()
        logger.warning("[Slack] SSL verify=OFF (unverified)")

    payload = {
        "text": f"File drop blob storage is filling up ({disk_percent:.1f}%)",
        "attachments": [
            {
                "color": "danger",
                "fields": [
                    {"title": "Server", "value": "File Drop", "short": True},
                    {"title": "BlobStore", "value": blob_store_name, "short": True},
                    {
                        "title": "Disk Used",
                        "value": f"{disk_percent:.1f}%",
                        "short": True,
                    },
                    {
                        "title": "RAM Used",
                        "value": f"{memory_percent:.1f}%",
                        "short": True,
                    },
                    {
                        "title": "Process RSS",
                        "value": f"{process_rss_mb}MB"
                        if process_rss_mb is not None
                        else "n/a",
                        "short": True,
                    },
                ],
            }
        ],
    }

    try:
        req = urllib.request.Request(
            webhook_url or "",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.info("[Slack] sending alert...")
        with urllib.request.urlopen(req, timeout=5, context=ssl_ctx) as resp:
            code = getattr(resp, "status", None) or getattr(resp, "code", None)
            logger.info(f"[Slack] sent, status={code}")
            try:
                return True, int(code) if code is not None else None
            except Exception:
                return True, None
    except Exception as slack_err:  # pragma: no cover
        logger.error(f"[Slack] send failed: {slack_err}")
        return True, None
