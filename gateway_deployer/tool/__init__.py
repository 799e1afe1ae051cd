"""Command line tool for rendering and deploying gateway proxies."""
