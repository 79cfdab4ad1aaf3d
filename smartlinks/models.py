from django.db import models


class SmartLink(models.Model):
    """
    Public landing page for a song that fans reach by slug, listing one
    button per streaming service.
    """

    song = models.ForeignKey(
        'catalog.Song',
        on_delete=models.CASCADE,
        related_name='smart_links'
    )
    slug = models.SlugField(max_length=200, unique=True, help_text="Public path segment, e.g. 'low-tide'")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    image_url = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Cover image, absolute or relative (e.g. /media/covers/low-tide.jpg)"
    )
    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.title} (/{self.slug})"


class SmartLinkDestination(models.Model):
    """One streaming service button on a smart link."""

    smart_link = models.ForeignKey(SmartLink, on_delete=models.CASCADE, related_name='destinations')
    service_key = models.CharField(max_length=50, help_text="Service identifier used in redirect URLs, e.g. 'spotify'")
    label = models.CharField(max_length=100)
    url = models.URLField(max_length=1000)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['smart_link', 'service_key'], name='unique_smart_link_service'),
        ]

    def __str__(self):
        return f"{self.smart_link.slug} -> {self.service_key}"


class SmartLinkClick(models.Model):
    """A redirect through a destination. Raw rows are kept; analytics filter them."""

    smart_link = models.ForeignKey(SmartLink, on_delete=models.CASCADE, related_name='clicks')
    service_key = models.CharField(max_length=50, db_index=True)
    user_agent = models.TextField(blank=True, null=True)
    referrer = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.smart_link_id}:{self.service_key} @ {self.created_at}"
