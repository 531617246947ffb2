"""Domain services: credits, pricing, homeowner analysis, product catalog, location and crack-cause helpers."""
