"""
UploadBatch model — progress record for a multi-file upload.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from opsman.models.enums import UploadStatus


class UploadBatch(models.Model):
    """
    One user-initiated upload of several files.

    processed_files counts every settled file (successful or not);
    failed_files is the subset that failed.
    """

    name = models.CharField(max_length=200, blank=True, default='')
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='upload_batches',
        verbose_name=_('Uploaded by'),
    )

    total_files = models.PositiveIntegerField(default=0)
    processed_files = models.PositiveIntegerField(default=0)
    failed_files = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=UploadStatus.choices,
        default=UploadStatus.PROCESSING,
        db_index=True,
        verbose_name=_('Status'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Upload batch')
        verbose_name_plural = _('Upload batches')
        ordering = ['-created_at']

    @property
    def is_finished(self) -> bool:
        return self.status != UploadStatus.PROCESSING

    def __str__(self) -> str:
        label = self.name or f"#{self.pk}"
        return f"Upload {label} [{self.status}] {self.processed_files}/{self.total_files}"
