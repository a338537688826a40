"""Article Tags: articles, tags and the links between them."""
