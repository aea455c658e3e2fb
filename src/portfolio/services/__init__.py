"""Domain services: articles, banners and the login guard."""
