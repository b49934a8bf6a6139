from .extractor import SportsExtractor, parse_categories, parse_events, slug_of

__all__ = ["SportsExtractor", "parse_categories", "parse_events", "slug_of"]
