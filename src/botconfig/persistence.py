"""
Loading and saving .bot files.

Provides:
- load / load_async: read, parse, and decrypt a .bot file
- load_from_folder / load_from_folder_async: pick the first .bot file in a folder
- save / save_as (and async forms): prune, encrypt a copy, write

The synchronous forms run the coroutine with asyncio.run() and must not be
called from inside a running event loop.

Saving never puts the live configuration into ciphertext form: when a
secret is established, an encrypted copy is serialized instead. A failed
write therefore leaves the in-memory configuration exactly as it was.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import aiofiles

from botconfig.configuration import BotConfiguration
from botconfig.exceptions import MissingArgumentError, NoLocationError, NotFoundError
from botconfig.settings import Settings, get_settings

__all__ = [
    "find_bot_file",
    "load",
    "load_async",
    "load_from_folder",
    "load_from_folder_async",
    "save",
    "save_async",
    "save_as",
    "save_as_async",
]

logger = logging.getLogger(__name__)

PathArg = str | os.PathLike[str]


# =============================================================================
# LOAD
# =============================================================================


async def load_async(
    path: PathArg,
    secret: str | None = None,
    settings: Settings | None = None,
    config_type: type[BotConfiguration] = BotConfiguration,
) -> BotConfiguration:
    """
    Load a bot configuration from a .bot file.

    If the file carries a validator token, every sensitive field is
    decrypted before the configuration is returned. Without a token the
    secret argument is ignored.

    Args:
        path: Path to the .bot file
        secret: Secret the file was saved with
        settings: Library settings (defaults to get_settings())
        config_type: Class to build, BotConfiguration or a subclass

    Raises:
        MissingArgumentError: If path is empty
        MissingSecretError: If the file is encrypted and secret is missing
        InvalidSecretError: If the file is encrypted and secret is wrong
        OSError: If the file cannot be read
    """
    if not path:
        raise MissingArgumentError("path")
    settings = settings or get_settings()

    async with aiofiles.open(path, "r", encoding=settings.encoding) as f:
        text = await f.read()

    config = config_type.from_json(text, settings=settings)
    config._bind_location(path)

    if config.secret_key.is_established:
        config.decrypt(secret)

    logger.info(
        "Loaded bot configuration",
        extra={"path": config.location, "services": len(config.services)},
    )
    return config


def load(
    path: PathArg,
    secret: str | None = None,
    settings: Settings | None = None,
    config_type: type[BotConfiguration] = BotConfiguration,
) -> BotConfiguration:
    """Blocking form of load_async()."""
    if not path:
        raise MissingArgumentError("path")
    return asyncio.run(load_async(path, secret, settings, config_type))


def find_bot_file(folder: PathArg, extension: str = ".bot") -> Path:
    """
    Return the first file in folder (not recursive) ending in extension.

    Files are taken in sorted name order.

    Raises:
        NotFoundError: If the folder has no such file or does not exist
    """
    candidates = sorted(p for p in Path(folder).glob(f"*{extension}") if p.is_file())
    if not candidates:
        raise NotFoundError(
            f"No {extension} file found in {os.fspath(folder)}. "
            f"Choose a different location or create a {extension} file first",
            path=os.fspath(folder),
        )
    return candidates[0]


async def load_from_folder_async(
    folder: PathArg,
    secret: str | None = None,
    settings: Settings | None = None,
    config_type: type[BotConfiguration] = BotConfiguration,
) -> BotConfiguration:
    """Load the first .bot file found in folder."""
    if not folder:
        raise MissingArgumentError("folder")
    settings = settings or get_settings()
    path = find_bot_file(folder, settings.file_extension)
    return await load_async(path, secret, settings, config_type)


def load_from_folder(
    folder: PathArg,
    secret: str | None = None,
    settings: Settings | None = None,
    config_type: type[BotConfiguration] = BotConfiguration,
) -> BotConfiguration:
    """Blocking form of load_from_folder_async()."""
    if not folder:
        raise MissingArgumentError("folder")
    return asyncio.run(load_from_folder_async(folder, secret, settings, config_type))


# =============================================================================
# SAVE
# =============================================================================


async def save_as_async(
    config: BotConfiguration,
    path: PathArg | None = None,
    secret: str | None = None,
) -> None:
    """
    Write config to path, or to its location if path is None.

    Steps:
    1. An explicit secret is validated even if there is nothing to encrypt
       (this establishes a token on a configuration that has none).
    2. Dispatch service_ids naming missing services are pruned, on the
       live configuration.
    3. With an established token, an encrypted copy is serialized;
       otherwise the configuration is written as plaintext without any
       cipher call.
    4. The file is replaced in full and location is bound to it.

    Raises:
        NoLocationError: If path is None and config has no location
        MissingSecretError: If the token is established and secret is missing
        InvalidSecretError: If secret does not match the token
        OSError: If the file cannot be written
    """
    target = path or config.location
    if not target:
        raise NoLocationError()

    if secret:
        config.validate_secret(secret)

    config.prune_dispatch_references()

    if config.secret_key.is_established:
        document = config.encrypted_copy(secret)
    else:
        document = config
    text = document.to_json()

    async with aiofiles.open(target, "w", encoding=config.settings.encoding) as f:
        await f.write(text)

    config._bind_location(target)
    logger.info(
        "Saved bot configuration",
        extra={
            "path": config.location,
            "services": len(config.services),
            "encrypted": config.secret_key.is_established,
        },
    )


def save_as(
    config: BotConfiguration,
    path: PathArg | None = None,
    secret: str | None = None,
) -> None:
    """Blocking form of save_as_async()."""
    if not path and not config.location:
        raise NoLocationError()
    asyncio.run(save_as_async(config, path, secret))


async def save_async(config: BotConfiguration, secret: str | None = None) -> None:
    """Write config back to its location."""
    await save_as_async(config, None, secret)


def save(config: BotConfiguration, secret: str | None = None) -> None:
    """Blocking form of save_async()."""
    save_as(config, None, secret)
