import json
from datetime import datetime, timezone

from botocore.exceptions import BotoCoreError, ClientError

from site_guard.errors import TransportError

AVAILABILITY_METRIC = "WebsiteAvailability"
RESTART_METRIC = "InstanceRestart"


class MetricsPublisher:
    """Writes single Count datapoints to one CloudWatch namespace."""

    def __init__(self, cloudwatch, namespace):
        self.cloudwatch = cloudwatch
        self.namespace = namespace

    def publish(self, name, value, dimensions):
        datum = {
            "MetricName": name,
            "Value": float(value),
            "Unit": "Count",
            "Timestamp": datetime.now(timezone.utc),
            "Dimensions": [{"Name": k, "Value": v} for k, v in dimensions.items()],
        }
        try:
            self.cloudwatch.put_metric_data(Namespace=self.namespace, MetricData=[datum])
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"failed to publish metric {name}: {e}") from e
        print(json.dumps({"stage": "metric_published", "namespace": self.namespace,
                          "metric": name, "value": float(value)}))
