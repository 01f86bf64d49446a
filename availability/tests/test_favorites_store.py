import asyncio

import pytest

from availability.client.favorites import FavoritesStore, ToggleOutcome
from availability.client.remote import FavoriteConflict, FavoritesRemote, RemoteError


class FakeRemote(FavoritesRemote):
    """In-memory server; ``gate`` holds requests until the test releases them."""

    def __init__(self, names=()):
        self.names = set(names)
        self.calls = []
        self.fail_with = {}
        self.gates = {}

    async def _wait(self, ward_name):
        gate = self.gates.get(ward_name)
        if gate is not None:
            await gate.wait()
        if ward_name in self.fail_with:
            raise self.fail_with[ward_name]

    async def add_favorite(self, ward_name):
        self.calls.append(('add', ward_name))
        await self._wait(ward_name)
        if ward_name in self.names:
            raise FavoriteConflict()
        self.names.add(ward_name)

    async def remove_favorite(self, ward_name):
        self.calls.append(('remove', ward_name))
        await self._wait(ward_name)
        if ward_name not in self.names:
            return False
        self.names.discard(ward_name)
        return True

    async def list_favorite_ward_names(self):
        return sorted(self.names)


def make_store(remote):
    events = []
    store = FavoritesStore(
        remote,
        on_success=lambda ward, fav: events.append(('ok', ward, fav)),
        on_error=lambda ward, message: events.append(('error', ward, message)),
    )
    return store, events


def test_toggle_round_trip():
    async def scenario():
        remote = FakeRemote()
        store, events = make_store(remote)
        assert await store.toggle('Kardiologia') is ToggleOutcome.APPLIED
        assert store.is_favorite('Kardiologia')
        assert remote.names == {'Kardiologia'}
        assert await store.toggle('Kardiologia') is ToggleOutcome.APPLIED
        assert not store.is_favorite('Kardiologia')
        assert remote.names == set()
        assert events == [('ok', 'Kardiologia', True), ('ok', 'Kardiologia', False)]
        assert store.pending_wards == frozenset()

    asyncio.run(scenario())


def test_optimistic_state_while_pending():
    async def scenario():
        remote = FakeRemote()
        remote.gates['Kardiologia'] = asyncio.Event()
        store, _ = make_store(remote)
        task = asyncio.create_task(store.toggle('Kardiologia'))
        await asyncio.sleep(0)
        assert store.is_favorite('Kardiologia')
        assert store.is_pending('Kardiologia')
        assert await store.toggle('Kardiologia') is ToggleOutcome.REJECTED
        assert remote.calls == [('add', 'Kardiologia')]
        remote.gates['Kardiologia'].set()
        assert await task is ToggleOutcome.APPLIED
        assert not store.is_pending('Kardiologia')

    asyncio.run(scenario())


def test_failure_rolls_back_with_server_message():
    async def scenario():
        remote = FakeRemote()
        remote.fail_with['Kardiologia'] = RemoteError('DATABASE_ERROR', 'Failed to add favorite to database')
        store, events = make_store(remote)
        assert await store.toggle('Kardiologia') is ToggleOutcome.ROLLED_BACK
        assert not store.is_favorite('Kardiologia')
        assert not store.is_pending('Kardiologia')
        assert events == [('error', 'Kardiologia', 'Failed to add favorite to database')]

    asyncio.run(scenario())


def test_failure_without_message_uses_default():
    async def scenario():
        remote = FakeRemote(['Kardiologia'])
        remote.fail_with['Kardiologia'] = RemoteError('NETWORK_ERROR', '')
        store, events = make_store(remote)
        store.add_local(['Kardiologia'])
        assert await store.toggle('Kardiologia') is ToggleOutcome.ROLLED_BACK
        assert store.is_favorite('Kardiologia')
        assert events == [('error', 'Kardiologia', 'Failed to update favorites')]

    asyncio.run(scenario())


def test_conflict_on_add_is_success():
    async def scenario():
        remote = FakeRemote(['Kardiologia'])
        store, events = make_store(remote)
        assert await store.toggle('Kardiologia') is ToggleOutcome.APPLIED
        assert store.is_favorite('Kardiologia')
        assert events == [('ok', 'Kardiologia', True)]

    asyncio.run(scenario())


def test_not_found_on_remove_is_success():
    async def scenario():
        remote = FakeRemote()
        store, events = make_store(remote)
        store.add_local(['Kardiologia'])
        assert await store.toggle('Kardiologia') is ToggleOutcome.APPLIED
        assert not store.is_favorite('Kardiologia')
        assert events == [('ok', 'Kardiologia', False)]

    asyncio.run(scenario())


def test_rollback_does_not_touch_other_wards():
    async def scenario():
        remote = FakeRemote()
        remote.gates['Kardiologia'] = asyncio.Event()
        remote.gates['Neurologia'] = asyncio.Event()
        remote.fail_with['Kardiologia'] = RemoteError('DATABASE_ERROR', 'boom')
        store, _ = make_store(remote)

        first = asyncio.create_task(store.toggle('Kardiologia'))
        second = asyncio.create_task(store.toggle('Neurologia'))
        await asyncio.sleep(0)
        assert store.favorites == {'Kardiologia', 'Neurologia'}

        remote.gates['Kardiologia'].set()
        assert await first is ToggleOutcome.ROLLED_BACK
        # Neurologia is still in flight and keeps its optimistic state
        assert store.favorites == {'Neurologia'}
        assert store.is_pending('Neurologia')

        remote.gates['Neurologia'].set()
        assert await second is ToggleOutcome.APPLIED
        assert store.favorites == {'Neurologia'}

    asyncio.run(scenario())


def test_unexpected_error_restores_and_propagates():
    class Broken(FakeRemote):
        async def add_favorite(self, ward_name):
            raise KeyError(ward_name)

    async def scenario():
        store, _ = make_store(Broken())
        with pytest.raises(KeyError):
            await store.toggle('Kardiologia')
        assert not store.is_favorite('Kardiologia')
        assert not store.is_pending('Kardiologia')

    asyncio.run(scenario())


def test_load_keeps_pending_wards():
    async def scenario():
        remote = FakeRemote(['Neurologia', 'Chirurgia'])
        remote.gates['Chirurgia'] = asyncio.Event()
        store, _ = make_store(remote)
        await store.load()
        assert store.favorites == {'Neurologia', 'Chirurgia'}

        task = asyncio.create_task(store.toggle('Chirurgia'))
        await asyncio.sleep(0)
        await store.load()
        assert store.favorites == {'Neurologia'}
        remote.gates['Chirurgia'].set()
        await task

    asyncio.run(scenario())


def test_close_clears_state():
    store, _ = make_store(FakeRemote())
    store.add_local(['A', 'B'])
    store.remove_local(['B'])
    assert store.favorites == {'A'}
    store.close()
    assert store.favorites == frozenset()
