"""
External Service Clients
========================
WeatherStack weather provider (services.weather) and the downstream
itinerary pipeline (services.itinerary)
"""
