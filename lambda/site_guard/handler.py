import json

import boto3
from botocore.exceptions import BotoCoreError

from site_guard.config import fail_on_error, load_settings
from site_guard.errors import ConfigError, RemediationFailed, SiteGuardError
from site_guard.instance import InstanceController
from site_guard.metrics import AVAILABILITY_METRIC, RESTART_METRIC, MetricsPublisher
from site_guard.probe import is_up


def _clients(settings):
    kwargs = {"region_name": settings.region} if settings.region else {}
    try:
        return boto3.client("ec2", **kwargs), boto3.client("cloudwatch", **kwargs)
    except BotoCoreError as e:
        raise ConfigError(f"Failed to load AWS config: {e}") from e


def _publish(publisher, name, value, dimensions):
    try:
        publisher.publish(name, value, dimensions)
    except Exception as e:
        print(json.dumps({"stage": "metric_publish_failed", "metric": name, "error": str(e)}))


def run(settings, ec2, cloudwatch, probe=is_up):
    """Probe the site and restart the instance if it is down.

    Returns the result dict; controller errors propagate to the caller.
    """
    url, instance_id = settings.website_url, settings.instance_id
    publisher = MetricsPublisher(cloudwatch, settings.metric_namespace)

    up = probe(url, settings.request_timeout)
    print(json.dumps({"stage": "probe", "url": url, "up": up}))
    _publish(publisher, AVAILABILITY_METRIC, 1.0 if up else 0.0, {"WebsiteURL": url})
    if up:
        return {"message": f"Website {url} is up and running. No restart needed."}

    controller = InstanceController(
        ec2,
        poll_delay=settings.stop_poll_seconds,
        max_wait=settings.stop_wait_seconds,
    )
    controller.restart(instance_id)
    _publish(publisher, RESTART_METRIC, 1.0, {"InstanceID": instance_id, "WebsiteURL": url})
    return {"message": f"Website {url} was down. Successfully restarted EC2 instance {instance_id}"}


def handler(event, context):
    # Resolved before the required settings so config errors honour it too.
    raise_errors = fail_on_error()
    try:
        settings = load_settings()
        ec2, cloudwatch = _clients(settings)
        result = run(settings, ec2, cloudwatch)
    except SiteGuardError as e:
        result = {"error": e.message}
        print(json.dumps({"stage": "failed", "code": e.code.value if e.code else None,
                          "error": e.message}))
        if raise_errors:
            raise RemediationFailed(result, cause=e) from e
        return result
    print(json.dumps({"stage": "done", **result}))
    return result
