import asyncio

import pytest

from socialnet.core.errors import NotFoundError, ValidationError
from socialnet.services.interests import InterestService


@pytest.mark.asyncio
async def test_put_category_keeps_item_order(db, make_user):
    alice = await make_user("Alice")
    service = InterestService(db)

    interest = await service.put_category(alice.id, "Music", [
        {"name": "Jazz", "rating": 5},
        {"name": "Blues", "rating": 3},
    ])

    assert interest.category == "Music"
    assert [(i.name, i.rating) for i in interest.items] == [("Jazz", 5), ("Blues", 3)]


@pytest.mark.asyncio
async def test_put_category_replaces_items(db, make_user):
    alice = await make_user("Alice")
    service = InterestService(db)
    await service.put_category(alice.id, "Music", [{"name": "Jazz", "rating": 5}])

    interest = await service.put_category(alice.id, "Music", [{"name": "Techno", "rating": 2}])

    assert [i.name for i in interest.items] == ["Techno"]
    assert len(await service.list_for_user(alice.id)) == 1


@pytest.mark.asyncio
async def test_categories_listed_in_creation_order(db, make_user):
    alice = await make_user("Alice")
    service = InterestService(db)
    for category in ("Sports", "Books", "Movies"):
        await service.put_category(alice.id, category, [])

    categories = [i.category for i in await service.list_for_user(alice.id)]

    assert categories == ["Sports", "Books", "Movies"]


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_out_of_range(db, make_user, rating):
    alice = await make_user("Alice")

    with pytest.raises(ValidationError):
        await InterestService(db).put_category(alice.id, "Music", [{"name": "Jazz", "rating": rating}])


@pytest.mark.asyncio
async def test_blank_category(db, make_user):
    alice = await make_user("Alice")

    with pytest.raises(ValidationError):
        await InterestService(db).put_category(alice.id, "   ", [])


@pytest.mark.asyncio
async def test_delete_category(db, make_user):
    alice = await make_user("Alice")
    service = InterestService(db)
    await service.put_category(alice.id, "Music", [{"name": "Jazz", "rating": 4}])

    await service.delete_category(alice.id, "Music")

    assert await service.list_for_user(alice.id) == []
    with pytest.raises(NotFoundError):
        await service.delete_category(alice.id, "Music")


@pytest.mark.asyncio
async def test_interests_are_per_user(db, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    service = InterestService(db)
    await service.put_category(alice.id, "Music", [{"name": "Jazz", "rating": 4}])

    assert await service.list_for_user(bob.id) == []


@pytest.mark.asyncio
async def test_concurrent_puts_of_new_category(session_factory, make_user):
    alice = await make_user("Alice")

    async def put(items):
        async with session_factory() as session:
            interest = await InterestService(session).put_category(alice.id, "Music", items)
            return [i.name for i in interest.items]

    results = await asyncio.gather(
        put([{"name": "Jazz", "rating": 5}]),
        put([{"name": "Techno", "rating": 2}]),
    )

    # both writes succeed; the later one wins
    assert all(r in (["Jazz"], ["Techno"]) for r in results)
    async with session_factory() as session:
        stored = await InterestService(session).list_for_user(alice.id)
    assert [i.category for i in stored] == ["Music"]
    assert len(stored[0].items) == 1


@pytest.mark.asyncio
async def test_category_name_is_trimmed_everywhere(db, make_user):
    alice = await make_user("Alice")
    service = InterestService(db)

    created = await service.put_category(alice.id, " Music ", [{"name": "Jazz", "rating": 4}])
    assert created.category == "Music"

    await service.delete_category(alice.id, " Music")

    assert await service.list_for_user(alice.id) == []
