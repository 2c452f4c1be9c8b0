"""Write built configurations to disk."""

from __future__ import annotations

import anyio

from subconv.builders import BaseConfigBuilder


async def write_config(
    builder: BaseConfigBuilder, directory: str | anyio.Path, filename: str
) -> anyio.Path:
    text = builder.build()

    await anyio.Path(directory).mkdir(exist_ok=True, parents=True)

    file_name = anyio.Path(directory, filename)
    async with await file_name.open("w", encoding="utf-8") as handle:
        await handle.write(text)

    return file_name
