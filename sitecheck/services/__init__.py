"""
Audit services: fetching, rendering, checks, sitemap crawling and reports.
"""
