"""Channel Teardown — warning, delayed deletion and idempotent close.

Invariants:
    - Close posts the warning immediately and deletes only after the delay
    - Missing channel: success without message or schedule
    - Second close while CLOSING: no second warning, no duplicate schedule
    - Lookup transport error: LookupFailedError and nothing scheduled
    - Concurrent close of the same channel shares the first attempt's outcome, errors included
"""

import asyncio

import pytest

from zstore.core.domain_types import ChannelState, CloseStatus
from zstore.core.errors import CloseFailedError, DiscordAPIError, LookupFailedError
from zstore.services.channel_teardown import ChannelTeardown
from zstore.services.deletion_scheduler import DeletionScheduler

from tests.fakes import GUILD_ID, transport_error

DELAY = 0.05


@pytest.fixture
def scheduler(fake_discord):
    return DeletionScheduler(fake_discord)


@pytest.fixture
def teardown(fake_discord, scheduler):
    return ChannelTeardown(fake_discord, scheduler, delay_seconds=DELAY, guild_id=GUILD_ID)


async def test_scenario_close_c1_by_sam(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")

    ack = await teardown.close_channel("C1", "Sam")

    assert ack.status == CloseStatus.CLOSING
    assert ack.state == ChannelState.CLOSING
    assert ack.task_id == scheduler.get("C1").task_id
    (warning,) = fake_discord.messages_for("C1")
    assert "Sam" in warning["content"]
    assert "C1" in fake_discord.channels

    await asyncio.wait_for(scheduler.get("C1").task, timeout=1)
    assert fake_discord.deleted == ["C1"]


async def test_close_missing_channel_is_noop(teardown, scheduler, fake_discord):
    ack = await teardown.close_channel("NOPE", "Sam")
    assert ack.status == CloseStatus.NOT_FOUND
    assert ack.state is None
    assert fake_discord.messages == []
    assert scheduler.pending() == []


async def test_close_after_deletion_is_noop(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")
    await teardown.close_channel("C1", "Sam")
    await asyncio.wait_for(scheduler.get("C1").task, timeout=1)

    ack = await teardown.close_channel("C1", "Sam")
    assert ack.status == CloseStatus.NOT_FOUND
    assert fake_discord.calls.count("delete_channel") == 1
    assert len(fake_discord.messages_for("C1")) == 1


async def test_second_close_while_closing_does_not_duplicate(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")
    first = await teardown.close_channel("C1", "Sam")
    second = await teardown.close_channel("C1", "Kim")

    assert second.status == CloseStatus.ALREADY_CLOSING
    assert second.task_id == first.task_id
    assert len(fake_discord.messages_for("C1")) == 1
    assert len(scheduler.pending()) == 1
    await asyncio.wait_for(scheduler.get("C1").task, timeout=1)
    assert fake_discord.calls.count("delete_channel") == 1


async def test_concurrent_closes_schedule_once(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")
    acks = await asyncio.gather(
        teardown.close_channel("C1", "Sam"),
        teardown.close_channel("C1", "Kim"),
    )
    statuses = sorted(a.status.value for a in acks)
    assert statuses == ["already_closing", "closing"]
    assert len(fake_discord.messages_for("C1")) == 1
    await scheduler.shutdown()


async def test_concurrent_close_shares_lookup_failure(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")
    release = asyncio.Event()

    async def stalled_fetch(channel_id):
        await release.wait()
        raise transport_error()

    fake_discord.fetch_channel = stalled_fetch
    first = asyncio.create_task(teardown.close_channel("C1", "Sam"))
    await asyncio.sleep(0)
    second = asyncio.create_task(teardown.close_channel("C1", "Kim"))
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, second, return_exceptions=True)
    assert [type(r) for r in results] == [LookupFailedError, LookupFailedError]
    assert scheduler.pending() == []
    assert fake_discord.deleted == []
    assert fake_discord.messages == []

    # Nothing left in flight: a retry once Discord recovers closes normally
    del fake_discord.fetch_channel
    ack = await teardown.close_channel("C1", "Sam")
    assert ack.status == CloseStatus.CLOSING
    await scheduler.shutdown()


async def test_concurrent_close_of_missing_channel_reports_not_found(teardown, scheduler):
    acks = await asyncio.gather(
        teardown.close_channel("NOPE", "Sam"),
        teardown.close_channel("NOPE", "Kim"),
    )
    assert [a.status for a in acks] == [CloseStatus.NOT_FOUND, CloseStatus.NOT_FOUND]
    assert scheduler.pending() == []


async def test_lookup_transport_error_raises(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")
    fake_discord.fail["fetch_channel"] = transport_error()
    with pytest.raises(LookupFailedError) as exc_info:
        await teardown.close_channel("C1", "Sam")
    assert exc_info.value.code == "LOOKUP_FAILED"
    assert scheduler.pending() == []
    assert fake_discord.messages == []


async def test_warning_failure_schedules_nothing(teardown, scheduler, fake_discord):
    fake_discord.add_channel("C1")
    fake_discord.fail["send_message"] = DiscordAPIError("Missing Access", "forbidden", 403)
    with pytest.raises(CloseFailedError):
        await teardown.close_channel("C1", "Sam")
    assert scheduler.pending() == []
    assert "C1" in fake_discord.channels


async def test_channel_from_other_guild_is_not_found(teardown, scheduler, fake_discord):
    fake_discord.add_channel("FOREIGN", guild_id="333")
    ack = await teardown.close_channel("FOREIGN", "Sam")
    assert ack.status == CloseStatus.NOT_FOUND
    assert "FOREIGN" in fake_discord.channels
    assert scheduler.pending() == []
