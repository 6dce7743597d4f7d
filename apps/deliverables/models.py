from django.db import models
import uuid

GITHUB_MIME_TYPE = 'application/x-github-repo'


class Deliverable(models.Model):
    """
    A file delivered to the client, or a link to a GitHub repository.

    Uploading a file under an existing name in the same project creates the
    next version rather than replacing the old one.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    project = models.ForeignKey('projects.Project', on_delete=models.CASCADE, related_name='deliverables')
    milestone = models.ForeignKey(
        'projects.Milestone',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='deliverables'
    )
    uploaded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='deliverables'
    )
    previous_version = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='next_versions'
    )

    file_name = models.CharField(max_length=255)
    file_url = models.URLField(max_length=1000)
    file_key = models.CharField(max_length=500, blank=True)
    file_size = models.BigIntegerField(null=True, blank=True)
    mime_type = models.CharField(max_length=150, blank=True)
    version = models.PositiveIntegerField(default=1)
    version_notes = models.TextField(blank=True)
    github_url = models.URLField(max_length=500, blank=True)

    download_count = models.PositiveIntegerField(default=0)
    last_downloaded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'deliverables'
        indexes = [
            models.Index(fields=['project', 'file_name']),
            models.Index(fields=['project', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.file_name} v{self.version}"

    @property
    def is_github_link(self):
        return self.mime_type == GITHUB_MIME_TYPE
