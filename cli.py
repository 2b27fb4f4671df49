"""CLI commands for guest list management."""

import asyncio

import typer

from guestlist.cache.config import CacheKeys
from guestlist.cache.service import cache_service
from guestlist.config.logging import setup_logging
from guestlist.guests.dtos import DuplicateGuestError, GuestCreateDTO, GuestStatus
from guestlist.guests.repository.store import SqlGuestStore
from guestlist.guests.service import GuestAggregateService

app = typer.Typer(help="CLI commands for guest list management")

SAMPLE_GUESTS = [
    GuestCreateDTO(
        first_name="Alice",
        last_name="Smith",
        city="Austin",
        state="TX",
        church="Grace Chapel",
        status=GuestStatus.CONFIRMED,
    ),
    GuestCreateDTO(
        first_name="John",
        last_name="Doe",
        city="Dallas",
        state="TX",
        church="First Baptist",
        is_pastor=True,
    ),
    GuestCreateDTO(first_name="Maria", last_name="Garcia", city="Houston", state="TX"),
    GuestCreateDTO(
        first_name="Samuel",
        last_name="Okafor",
        church="Grace Chapel",
        phone="555-0100",
        status=GuestStatus.DECLINED,
    ),
]


async def _service() -> GuestAggregateService:
    await cache_service.connect()
    return GuestAggregateService(store=SqlGuestStore(), cache=cache_service)


async def _seed():
    service = await _service()
    created, skipped = [], []
    try:
        for data in SAMPLE_GUESTS:
            try:
                created.append(await service.create(data))
            except DuplicateGuestError:
                skipped.append(data)
    finally:
        await cache_service.close()
    return created, skipped


@app.command()
def seed():
    """Insert a handful of sample guests. Existing names are skipped."""
    setup_logging()
    created, skipped = asyncio.run(_seed())

    for guest in created:
        typer.secho(
            f"Created guest {guest.id}: {guest.first_name} {guest.last_name or ''}",
            fg=typer.colors.GREEN,
        )
    for data in skipped:
        typer.secho(
            f"Skipped {data.first_name} {data.last_name or ''}: already exists",
            fg=typer.colors.YELLOW,
        )


async def _stats():
    service = await _service()
    try:
        return await service.get_stats()
    finally:
        await cache_service.close()


@app.command()
def stats():
    """Show guest counts by status."""
    result = asyncio.run(_stats())

    typer.secho(f"Total:     {result.total}", fg=typer.colors.CYAN, bold=True)
    typer.echo(f"Confirmed: {result.confirmed}")
    typer.echo(f"Pending:   {result.pending}")
    typer.echo(f"Declined:  {result.declined}")
    typer.echo(f"Pastors:   {result.pastors}")


async def _flush_cache() -> bool:
    connected = await cache_service.connect()
    try:
        if connected:
            await cache_service.clear()
        return connected
    finally:
        await cache_service.close()


async def _clear_guest_cache() -> int | None:
    connected = await cache_service.connect()
    try:
        if not connected:
            return None
        return await cache_service.invalidate_pattern(CacheKeys.ALL)
    finally:
        await cache_service.close()


def _redis_unreachable():
    typer.secho("Redis is not reachable", fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command()
def clear_cache(
    everything: bool = typer.Option(
        False, "--all", help="Flush the whole Redis database, not just guest keys"
    ),
):
    """Drop cached guest data."""
    if everything:
        if not asyncio.run(_flush_cache()):
            _redis_unreachable()
        typer.secho("Redis database flushed", fg=typer.colors.GREEN)
        return

    removed = asyncio.run(_clear_guest_cache())
    if removed is None:
        _redis_unreachable()
    typer.secho(f"Removed {removed} cached guest keys", fg=typer.colors.GREEN)


async def _cache_stats():
    await cache_service.connect()
    try:
        return await cache_service.get_stats()
    finally:
        await cache_service.close()


@app.command()
def cache_stats():
    """Show Redis hit/miss counters and keyspace size."""
    result = asyncio.run(_cache_stats())

    if result is None:
        _redis_unreachable()

    stats = result["stats"]
    typer.echo(f"Hits:   {stats.get('keyspace_hits', 0)}")
    typer.echo(f"Misses: {stats.get('keyspace_misses', 0)}")
    for db, info in result["keyspace"].items():
        typer.echo(f"{db}: {info}")


if __name__ == "__main__":
    app()
