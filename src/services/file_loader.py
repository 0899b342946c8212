import logging
import os
from typing import List, Tuple

from models.errors import PuzzleError
from models.puzzle import Puzzle
from parsers.puz_parser import MAGIC, PUZParser

logger = logging.getLogger(__name__)


class FileLoaderService:
    """Service for loading crossword puzzle files"""

    def __init__(self):
        self.parser = PUZParser()

    def load_puz_file(self, file_path: str) -> Puzzle:
        """Load a crossword puzzle from a .puz file"""
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        if not file_path.lower().endswith('.puz'):
            raise ValueError("File must have .puz extension")

        try:
            return self.parser.parse(file_path)
        except PuzzleError as e:
            e.args = (f"{file_path}: {e}",)
            raise

    def load_from_directory(self, directory: str) -> List[Tuple[str, Puzzle]]:
        """Load all .puz files from a directory"""
        if not os.path.isdir(directory):
            raise ValueError(f"Directory not found: {directory}")

        crossword_files = []
        for filename in sorted(os.listdir(directory)):
            if filename.lower().endswith('.puz'):
                try:
                    file_path = os.path.join(directory, filename)
                    puzzle = self.load_puz_file(file_path)
                    crossword_files.append((filename, puzzle))
                except (OSError, PuzzleError) as e:
                    logger.warning("Error loading %s: %s", filename, e)

        return crossword_files

    def get_file_info(self, file_path: str) -> dict:
        """Get basic information about a crossword file without fully parsing it"""
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            return {
                'error': str(e),
                'file_size': 0,
                'has_header': False
            }
        return {
            'file_size': len(data),
            'has_header': MAGIC in data
        }
