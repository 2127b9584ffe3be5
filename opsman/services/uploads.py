"""
Upload batches — run a chunked upload and keep its UploadBatch row current.

Usage:
    from opsman.services import Uploads

    batch, result = await Uploads.run(request.FILES.getlist('files'),
                                      name='Sales 2026-10-18', user=request.user)
"""

import inspect
import logging
import posixpath

from asgiref.sync import sync_to_async
from django.core.files.storage import default_storage
from django.utils import timezone

from opsman.conf import opsman_settings
from opsman.exceptions import UploadError
from opsman.models.enums import UploadStatus
from opsman.models.upload import UploadBatch
from opsman.uploads import analyze_files, process_in_chunks, validate_files

logger = logging.getLogger('opsman')


async def save_to_storage(file, index: int) -> str:
    """Default processor: store the file under UPLOAD_PATH."""
    path = posixpath.join(opsman_settings.UPLOAD_PATH, file.name)
    return await sync_to_async(default_storage.save)(path, file)


def _final_status(result) -> str:
    if result.cancelled:
        return UploadStatus.CANCELLED
    if result.failed and not result.successful:
        return UploadStatus.FAILED
    return UploadStatus.COMPLETED


class Uploads:
    """Tracked multi-file uploads."""

    @classmethod
    def analyze(cls, files, **options):
        return analyze_files(files, **options)

    @classmethod
    def validate(cls, files):
        return validate_files(files)

    @classmethod
    async def run(cls, files, processor=None, *, name='', user=None,
                  on_progress=None, cancel_event=None, **options):
        """
        Validate, record and process an upload.

        Args:
            files: Objects with .name and .size
            processor: async (file, index) callable; defaults to save_to_storage
            name: Label for the UploadBatch row
            user: Uploader (optional)
            on_progress: Extra (processed, total) callback
            cancel_event: asyncio.Event to stop before the next sub-batch
            **options: chunk_size, max_concurrent, chunk_delay

        Returns:
            (UploadBatch, UploadResult)

        Raises:
            UploadError('INVALID_BATCH'): size limits exceeded; nothing recorded
            Anything raised mid-run propagates after the row is marked failed
        """
        files = list(files)
        validation = validate_files(files)
        if not validation.valid:
            raise UploadError('INVALID_BATCH', errors=list(validation.errors))

        batch = await UploadBatch.objects.acreate(
            name=name,
            uploaded_by=user,
            total_files=len(files),
            status=UploadStatus.PROCESSING,
        )
        failed_seen = 0

        async def track(processed, total):
            batch.processed_files = processed
            batch.failed_files = failed_seen
            await batch.asave(update_fields=['processed_files', 'failed_files'])
            if on_progress is not None:
                ret = on_progress(processed, total)
                if inspect.isawaitable(ret):
                    await ret

        async def guarded(file, index):
            nonlocal failed_seen
            try:
                return await (processor or save_to_storage)(file, index)
            except Exception:
                failed_seen += 1
                raise

        try:
            result = await process_in_chunks(
                files, guarded, track, cancel_event=cancel_event, **options
            )
        except Exception:
            batch.failed_files = failed_seen
            batch.status = UploadStatus.FAILED
            batch.completed_at = timezone.now()
            await batch.asave(update_fields=['failed_files', 'status', 'completed_at'])
            logger.exception("upload.failed", extra={"upload_id": batch.pk})
            raise

        batch.processed_files = result.processed
        batch.failed_files = result.failed
        batch.status = _final_status(result)
        batch.completed_at = timezone.now()
        await batch.asave(update_fields=['processed_files', 'failed_files', 'status', 'completed_at'])

        logger.info(
            "upload.completed",
            extra={
                "upload_id": batch.pk,
                "status": batch.status,
                "successful": result.successful,
                "failed": result.failed,
                "skipped": result.skipped,
            },
        )
        return batch, result
