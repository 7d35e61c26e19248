"""
Unit tests for distribution pool membership polling and connection.
"""

import asyncio
from unittest.mock import patch

import pytest
from web3 import Web3

from src.core.errors import Rejected, Reverted, TimedOut
from src.core.types import MembershipState, TxStatus
from src.pools.membership import PoolMembershipController

from src.conftest import ACCOUNT, GDA_FORWARDER, GDA_POOL

POOL = Web3.to_checksum_address(GDA_POOL)
OTHER_POOL = "0x2222222222222222222222222222222222222222"


class TestReadMembership:
    """Single reads and the snapshot cache."""

    @pytest.mark.asyncio
    async def test_read_connected(self, transport, deployment):
        """A true flag is reported as connected."""
        transport.read_values = [True]
        controller = PoolMembershipController(transport, deployment)

        state = await controller.read_membership(ACCOUNT)

        assert state == MembershipState(connected=True, connecting=False)
        assert transport.reads == [{
            "address": GDA_FORWARDER,
            "function": "isMemberConnected",
            "args": [POOL, ACCOUNT],
        }]

    @pytest.mark.asyncio
    async def test_undefined_read_is_disconnected(self, transport, deployment):
        """An absent value means not connected, not an error."""
        controller = PoolMembershipController(transport, deployment)

        state = await controller.read_membership(ACCOUNT)

        assert state.connected is False

    @pytest.mark.asyncio
    async def test_pool_override(self, transport, deployment):
        """An explicit pool address is read instead of the configured one."""
        transport.read_values = [False]
        controller = PoolMembershipController(transport, deployment)

        await controller.read_membership(ACCOUNT, pool=OTHER_POOL)

        assert transport.reads[0]["args"][0] == OTHER_POOL

    def test_latest_state_defaults_to_disconnected(self, transport, deployment):
        """Nothing read yet is a disconnected snapshot."""
        controller = PoolMembershipController(transport, deployment)
        assert controller.latest_state(ACCOUNT) == MembershipState()


class TestPollMembership:
    """Repeated reads on an interval."""

    @pytest.mark.asyncio
    async def test_poll_yields_each_read(self, transport, deployment):
        """Each iteration performs one read and sleeps for the poll interval."""
        transport.read_values = [None, False, True]
        controller = PoolMembershipController(transport, deployment)

        states = []
        with patch("src.pools.membership.asyncio.sleep") as mock_sleep:
            mock_sleep.return_value = None
            poller = controller.poll_membership(ACCOUNT)
            async for state in poller:
                states.append(state.connected)
                if len(states) == 3:
                    break
            await poller.aclose()

        assert states == [False, False, True]
        assert len(transport.reads) == 3
        mock_sleep.assert_called_with(5.0)
        assert controller.latest_state(ACCOUNT).connected is True

    @pytest.mark.asyncio
    async def test_poll_survives_read_errors(self, transport, deployment):
        """A failed read re-yields the last snapshot and polling continues."""
        transport.read_error = ConnectionError("node unavailable")
        controller = PoolMembershipController(transport, deployment)

        poller = controller.poll_membership(ACCOUNT, interval=0)
        first = await poller.__anext__()
        transport.read_error = None
        transport.read_values = [True]
        second = await poller.__anext__()
        await poller.aclose()

        assert first == MembershipState()
        assert second.connected is True

    @pytest.mark.asyncio
    async def test_poll_cancellation_stops_reads(self, transport, deployment):
        """Cancelling the consuming task stops further reads."""
        transport.read_values = [False]
        controller = PoolMembershipController(transport, deployment)

        async def consume():
            async for _ in controller.poll_membership(ACCOUNT, interval=0.01):
                pass

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        reads_at_cancel = len(transport.reads)
        await asyncio.sleep(0.05)
        assert reads_at_cancel > 0
        assert len(transport.reads) == reads_at_cancel


class TestConnect:
    """One-shot connection with confirmation tracking."""

    @pytest.mark.asyncio
    async def test_already_connected_is_noop(self, transport, deployment):
        """No call is dispatched when the latest poll says connected."""
        transport.read_values = [True]
        controller = PoolMembershipController(transport, deployment)
        await controller.read_membership(ACCOUNT)

        outcome = await controller.connect(ACCOUNT)

        assert outcome.status is TxStatus.SKIPPED
        assert outcome.succeeded
        assert transport.calls == []
        assert transport.waits == []

    @pytest.mark.asyncio
    async def test_connect_reads_first_when_never_polled(self, transport, deployment):
        """Without a prior poll one read decides whether to connect."""
        transport.read_values = [True]
        controller = PoolMembershipController(transport, deployment)

        outcome = await controller.connect(ACCOUNT)

        assert outcome.status is TxStatus.SKIPPED
        assert len(transport.reads) == 1
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_connect_success(self, transport, deployment):
        """connectPool is sent with empty user data and waited on for 5 confirmations."""
        transport.read_values = [False]
        controller = PoolMembershipController(transport, deployment)
        seen = []

        def observer(outcome):
            seen.append((outcome.status, outcome.pending, outcome.succeeded, outcome.failed))
            seen_state.append(controller.latest_state(ACCOUNT))

        seen_state = []
        outcome = await controller.connect(ACCOUNT, observer=observer)

        assert outcome.status is TxStatus.CONFIRMED
        assert outcome.succeeded
        assert transport.calls == [{
            "address": GDA_FORWARDER,
            "function": "connectPool",
            "args": [POOL, b""],
        }]
        assert transport.waits == [{"tx_hash": outcome.last_tx_hash, "threshold": 5}]
        assert seen == [
            (TxStatus.PENDING, True, False, False),
            (TxStatus.ACCEPTED, True, False, False),
            (TxStatus.CONFIRMED, False, True, False),
        ]
        assert seen_state[1] == MembershipState(connected=False, connecting=True)
        assert controller.latest_state(ACCOUNT) == MembershipState(connected=True, connecting=False)

    @pytest.mark.asyncio
    async def test_connect_rejected(self, transport, deployment):
        """A rejected call fails without waiting or retrying."""
        transport.read_values = [False]
        transport.fail_on[0] = Rejected("user denied transaction")
        controller = PoolMembershipController(transport, deployment)

        outcome = await controller.connect(ACCOUNT)

        assert outcome.failed
        assert isinstance(outcome.error, Rejected)
        assert len(transport.calls) == 1
        assert transport.waits == []
        assert controller.latest_state(ACCOUNT) == MembershipState()

    @pytest.mark.parametrize("error", [Reverted("reverted"), TimedOut("timed out")])
    @pytest.mark.asyncio
    async def test_connect_fails_while_confirming(self, transport, deployment, error):
        """Errors while waiting for confirmations fail the outcome."""
        transport.read_values = [False]
        transport.wait_error = error
        controller = PoolMembershipController(transport, deployment)

        outcome = await controller.connect(ACCOUNT)

        assert outcome.failed
        assert outcome.error is error
        assert len(outcome.tx_hashes) == 1
        assert controller.latest_state(ACCOUNT).connecting is False

    @pytest.mark.asyncio
    async def test_connect_after_failure_starts_fresh(self, transport, deployment):
        """A new connect call dispatches again instead of resuming the failed one."""
        transport.read_values = [False]
        transport.fail_on[0] = Rejected("denied")
        controller = PoolMembershipController(transport, deployment)

        first = await controller.connect(ACCOUNT)
        second = await controller.connect(ACCOUNT)

        assert first.failed
        assert second.succeeded
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_connect_when_read_fails(self, transport, deployment):
        """An unreadable membership flag is treated as disconnected."""
        transport.read_error = ConnectionError("node unavailable")
        controller = PoolMembershipController(transport, deployment)

        outcome = await controller.connect(ACCOUNT)

        assert outcome.succeeded
        assert transport.function_names == ["connectPool"]
