from __future__ import annotations

import pytest

from itas_realtime.__main__ import _ensure_dialed
from itas_realtime.domain.value_objects.enums import ConnectionState
from itas_realtime.services.channel import ChannelOptions
from tests.conftest import make_channel


@pytest.mark.asyncio
async def test_cli_dials_once_without_auto_connect(factory, timer):
    async with make_channel(factory, timer, options=ChannelOptions(auto_connect=False)) as channel:
        _ensure_dialed(channel)
        factory.last.open()
        factory.last.drop()

        assert factory.dials == 1
        assert timer.handles == []
        assert channel.state is ConnectionState.CLOSED


@pytest.mark.asyncio
async def test_cli_leaves_auto_connected_channel_alone(factory, timer):
    async with make_channel(factory, timer) as channel:
        _ensure_dialed(channel)

        assert factory.dials == 1
        assert channel.state is ConnectionState.CONNECTING
