import asyncio  # noqa: D100
import logging
import sys
from pathlib import Path

import anyio

from subconv.builders import BUILDERS
from subconv.errors import SubconvError
from subconv.output import write_config
from subconv.settings import OUTPUT_FILENAMES, BuildRequest, load_build_request

logger = logging.getLogger(__name__)

DEFAULT_REQUEST = "subconv.yaml"


async def run(request: BuildRequest) -> list[anyio.Path]:  # noqa: D103
    tasks = [
        asyncio.create_task(
            write_config(
                BUILDERS[target](
                    request.preset,
                    request.custom_rules,
                    lang=request.lang,
                    proxies=request.proxies.get(target, ()),
                ),
                str(request.output_dir),
                OUTPUT_FILENAMES[target],
            ),
        )
        for target in request.targets
    ]
    return list(await asyncio.gather(*tasks))


def main(argv: list[str] | None = None) -> int:  # noqa: D103
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = sys.argv[1:] if argv is None else argv
    path = Path(args[0] if args else DEFAULT_REQUEST)

    try:
        request = load_build_request(path)
        written = asyncio.run(run(request))
    except SubconvError as exc:
        logger.error("%s", exc)  # noqa: TRY400
        return 1

    for file_name in written:
        logger.info("Wrote %s", file_name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
