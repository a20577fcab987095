"""
Geographic product discovery.

Services:
- ProductDiscoveryService: city, city-set and proximity product search
"""
