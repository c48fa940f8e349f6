import httpx
from loguru import logger

from ..core.config import Settings
from ..schemas import CompressionOptions, CompressionResult
from .domain import CompressionError, SelectionError, SourceFile

DEFAULT_FAILURE_MESSAGE = "Compression failed"
TRANSPORT_FAILURE_MESSAGE = "Failed to compress image"


class CompressionExecutor:
    def __init__(self, settings: Settings | None = None):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self.base_url = self.settings.COMPRESSION_SERVICE_URL

    async def compress(
        self, source_file: SourceFile | None, options: CompressionOptions
    ) -> CompressionResult:
        if source_file is None:
            raise SelectionError("Cannot compress without a selected file")

        url = f"{self.base_url}/api/compression/compress"

        logger.info(
            f"Compressing {source_file.filename} with method={options.method.value}, "
            f"quality={options.quality}, target_size_kb={options.target_size_kb}"
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.COMPRESSION_TIMEOUT
            ) as client:
                response = await client.post(
                    url,
                    data=options.to_form_fields(),
                    files={
                        "image": (
                            source_file.filename,
                            source_file.content,
                            source_file.content_type or "application/octet-stream",
                        )
                    },
                )

                if not response.is_success:
                    raise CompressionError(self._extract_error_message(response))

                result = CompressionResult(**response.json())

                logger.info(
                    f"Compressed {source_file.filename}: {result.original_size} -> "
                    f"{result.compressed_size} bytes in {result.processing_time:.1f}s"
                )

                return result

        except CompressionError:
            raise

        except httpx.TimeoutException as e:
            logger.error(f"Timeout compressing {source_file.filename}: {e}")
            raise CompressionError(TRANSPORT_FAILURE_MESSAGE) from e

        except httpx.RequestError as e:
            logger.error(f"Network error compressing {source_file.filename}: {e}")
            raise CompressionError(TRANSPORT_FAILURE_MESSAGE) from e

        except Exception as e:
            logger.exception(
                f"Unexpected error compressing {source_file.filename}: {e}"
            )
            raise CompressionError(TRANSPORT_FAILURE_MESSAGE) from e

    def _extract_error_message(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return DEFAULT_FAILURE_MESSAGE

        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return DEFAULT_FAILURE_MESSAGE
