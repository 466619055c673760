import json
import logging
import os
from typing import Any, Dict, List, Union

import aiofiles
import aiofiles.os as aios

from metacatalog.core.exceptions import InvalidParameterException, InternalErrorException, NotFoundException

logger = logging.getLogger(__name__)

class StorageAccessor:
    def __init__(self, baseStoragePath: str):
        self.baseStoragePath = baseStoragePath

    def resolvePath(self, relativeOrAbsolutePath: str) -> str:
        if os.path.isabs(relativeOrAbsolutePath):
            return relativeOrAbsolutePath

        fullPath = os.path.abspath(os.path.join(self.baseStoragePath, relativeOrAbsolutePath))
        if not fullPath.startswith(os.path.abspath(self.baseStoragePath)):
            raise InvalidParameterException(f"Path traversal attempt detected for relative path: {relativeOrAbsolutePath}")
        return fullPath

    async def readJsonFile(self, path: str) -> Union[Dict[str, Any], List[Any]]:
        resolvedPath = self.resolvePath(path)
        try:
            async with aiofiles.open(resolvedPath, mode='r', encoding='utf-8') as f:
                content = await f.read()
            return json.loads(content)
        except FileNotFoundError:
            raise NotFoundException(resourceType="File", identifier=resolvedPath)
        except json.JSONDecodeError as e:
            logger.error("Could not parse JSON from %s: %s", resolvedPath, e)
            raise InternalErrorException(f"Could not parse JSON from {resolvedPath}: {e}")
        except OSError as e:
            logger.error("Failed to read JSON file %s: %s", resolvedPath, e)
            raise InternalErrorException(f"Failed to read JSON file from {resolvedPath}: {str(e)}")

    async def writeJsonFile(self, path: str, data: Union[Dict[str, Any], List[Any]]):
        await self.writeJsonFiles({path: data})

    async def writeJsonFiles(self, documents: Dict[str, Union[Dict[str, Any], List[Any]]]):
        """
        Write every document to a sibling temp file, then swap them into
        place in the given order. Nothing is replaced unless every temp file
        was written.
        """
        staged = []
        try:
            for path, data in documents.items():
                resolvedPath = self.resolvePath(path)
                tempPath = f"{resolvedPath}.tmp"
                parentDir = os.path.dirname(resolvedPath)
                if not await aios.path.exists(parentDir):
                    await aios.makedirs(parentDir, exist_ok=True)
                content = json.dumps(data, indent=2)
                staged.append((tempPath, resolvedPath))
                async with aiofiles.open(tempPath, mode='w', encoding='utf-8') as f:
                    await f.write(content)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to stage JSON file %s: %s", path, e)
            await self._discard(tempPath for tempPath, _ in staged)
            raise InternalErrorException(f"Failed to write JSON file {path}: {str(e)}")

        for tempPath, resolvedPath in staged:
            try:
                await aios.replace(tempPath, resolvedPath)
            except OSError as e:
                logger.error("Failed to replace JSON file %s: %s", resolvedPath, e)
                raise InternalErrorException(f"Failed to write JSON file to {resolvedPath}: {str(e)}")

    async def _discard(self, tempPaths) -> None:
        for tempPath in tempPaths:
            try:
                await aios.remove(tempPath)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove staged file %s: %s", tempPath, e)

    async def fileExists(self, path: str) -> bool:
        resolvedPath = self.resolvePath(path)
        try:
            return await aios.path.exists(resolvedPath)
        except OSError as e:
            raise InternalErrorException(f"Failed to check existence of file {resolvedPath}: {str(e)}")

    async def ensureDirectory(self) -> None:
        try:
            await aios.makedirs(self.baseStoragePath, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create storage directory %s: %s", self.baseStoragePath, e)
            raise InternalErrorException(f"Failed to create storage directory {self.baseStoragePath}: {str(e)}")
