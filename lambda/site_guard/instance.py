"""EC2 instance lifecycle: state lookup, stop/start, and the restart procedure.

Restart is a small state machine keyed on the state observed on entry:

    running  -> stop, await stopped, re-check -> start
    stopped  -> start
    anything else -> UnstableStateError, nothing issued

StartInstances is only ever called right after a DescribeInstances that
returned ``stopped``. Stop is waited on, start is not.
"""

import json
import math
from enum import Enum

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from site_guard.errors import (
    InstanceNotFoundError,
    StopTimeoutError,
    TransportError,
    UnstableStateError,
)

NOT_FOUND_CODES = ("InvalidInstanceID.NotFound",)
MAX_ATTEMPTS_REASON = "Max attempts exceeded"


class PowerState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


# Phases to run before the final start, keyed by the state seen on entry.
# States missing from the table are refused.
RESTART_PLAN = {
    PowerState.RUNNING: ("stop", "await_stopped"),
    PowerState.STOPPED: (),
}


class InstanceController:
    def __init__(self, ec2, poll_delay=5.0, max_wait=300.0):
        self.ec2 = ec2
        self.poll_delay = poll_delay
        self.max_wait = max_wait

    @property
    def max_attempts(self):
        return max(1, math.ceil(self.max_wait / self.poll_delay))

    def get_state(self, instance_id):
        if not instance_id:
            raise ValueError("instance_id must not be empty")
        try:
            resp = self.ec2.describe_instances(InstanceIds=[instance_id])
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                raise InstanceNotFoundError(instance_id) from e
            raise TransportError(f"failed to describe instance {instance_id}: {e}") from e
        except BotoCoreError as e:
            raise TransportError(f"failed to describe instance {instance_id}: {e}") from e

        reservations = resp.get("Reservations") or []
        if not reservations or not reservations[0].get("Instances"):
            raise InstanceNotFoundError(instance_id)
        name = reservations[0]["Instances"][0]["State"]["Name"]
        state = PowerState(name)
        if state is PowerState.UNKNOWN:
            print(json.dumps({"stage": "unknown_state", "instance_id": instance_id, "state": name}))
        return state

    def stop(self, instance_id):
        try:
            self.ec2.stop_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"failed to stop instance {instance_id}: {e}") from e
        print(json.dumps({"stage": "stop_issued", "instance_id": instance_id}))

    def await_stopped(self, instance_id):
        """Block until the instance reports ``stopped`` or the wait ceiling is hit."""
        attempts = self.max_attempts
        try:
            self.ec2.get_waiter("instance_stopped").wait(
                InstanceIds=[instance_id],
                WaiterConfig={"Delay": self.poll_delay, "MaxAttempts": attempts},
            )
        except WaiterError as e:
            last = e.last_response or {}
            if "Error" in last:
                raise TransportError(f"failed waiting for instance {instance_id} to stop: {e}") from e
            reason = e.kwargs.get("reason", "")
            # Terminal acceptors fail before the ceiling is reached.
            waited = self.max_wait if reason == MAX_ATTEMPTS_REASON else None
            raise StopTimeoutError(instance_id, waited, reason) from e
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"failed waiting for instance {instance_id} to stop: {e}") from e
        print(json.dumps({"stage": "instance_stopped", "instance_id": instance_id,
                          "max_attempts": attempts}))

    def start(self, instance_id):
        try:
            self.ec2.start_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"failed to start instance {instance_id}: {e}") from e
        print(json.dumps({"stage": "start_issued", "instance_id": instance_id}))

    def restart(self, instance_id):
        state = self.get_state(instance_id)
        print(json.dumps({"stage": "restart_observed", "instance_id": instance_id,
                          "state": state.value}))
        plan = RESTART_PLAN.get(state)
        if plan is None:
            raise UnstableStateError(instance_id, state.value)

        for phase in plan:
            getattr(self, phase)(instance_id)
        if plan:
            state = self.get_state(instance_id)
            print(json.dumps({"stage": "restart_rechecked", "instance_id": instance_id,
                              "state": state.value}))

        if state is not PowerState.STOPPED:
            raise UnstableStateError(instance_id, state.value)
        self.start(instance_id)
