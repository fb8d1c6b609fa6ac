import logging
import aiofiles
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


class ResultStorage:
    """Writes crawl results to text files, one value per line"""

    def __init__(self, base_path='crawl_data'):
        self.base_path = Path(base_path)

    def get_file_path(self, filename: str) -> Path:
        """Resolve ``filename`` against the base directory unless it is absolute"""
        path = Path(filename)
        return path if path.is_absolute() else self.base_path / path

    async def save_results(self, filename: str, values: Iterable[str]) -> Path:
        """Save values, replacing any previous file of that name"""
        file_path = self.get_file_path(filename)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        values = list(values)
        async with aiofiles.open(file_path, 'w', encoding='utf-8') as f:
            await f.write(''.join(f"{value}\n" for value in values))

        logger.info(f"Saved {len(values)} results to {file_path}")
        return file_path

    async def load_results(self, filename: str) -> List[str]:
        """Read values written by ``save_results``"""
        file_path = self.get_file_path(filename)
        async with aiofiles.open(file_path, 'r', encoding='utf-8') as f:
            content = await f.read()
        return [line for line in content.splitlines() if line.strip()]
