"""HTTP routers mounted by :mod:`movie_explorer.main`."""
