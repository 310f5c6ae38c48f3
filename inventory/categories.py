from django.conf import settings


def menu_categories():
    """Configured (slug, label) pairs, in display order"""
    return list(settings.MENU_CATEGORIES)


def category_slugs():
    return [slug for slug, _ in menu_categories()]


def category_label(slug):
    return dict(menu_categories()).get(slug, slug)
