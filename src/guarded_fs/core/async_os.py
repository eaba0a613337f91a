"""Async versions of the os and shutil calls aiofiles does not ship.

aiofiles.os covers stat, rename, replace, unlink, rmdir, mkdir, makedirs,
link, symlink, readlink and listdir; aiofiles.os.path covers exists,
isfile, isdir, islink and getsize. The rest are wrapped here the same way
so every disk access in the core goes through the aiofiles executor.
"""

import os
import shutil

import aiofiles.os

lexists = aiofiles.os.wrap(os.path.lexists)
realpath = aiofiles.os.wrap(os.path.realpath)
lstat = aiofiles.os.wrap(os.lstat)
chmod = aiofiles.os.wrap(os.chmod)
fsync = aiofiles.os.wrap(os.fsync)
copy2 = aiofiles.os.wrap(shutil.copy2)
move = aiofiles.os.wrap(shutil.move)


async def same_entry(first: str, second: str) -> bool:
    """Whether two paths name the same directory entry or inode.

    Symbolic links are not followed, so a link is never the same entry as
    its target. Identical path strings always match, even when missing.
    """
    if first == second:
        return True
    if not (await lexists(first) and await lexists(second)):
        return False
    return os.path.samestat(await lstat(first), await lstat(second))
