from .models import Song


def generate_next_catalog_number():
    """
    Next catalog number in 00001, 00002, ... form.

    Non-numeric catalog numbers are ignored when finding the maximum.
    """
    highest = 0
    for value in Song.objects.exclude(catalog_number__isnull=True).values_list('catalog_number', flat=True):
        try:
            highest = max(highest, int(value))
        except (TypeError, ValueError):
            continue
    return str(highest + 1).zfill(5)
