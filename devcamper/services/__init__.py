"""
DevCamper Backend — Services Layer
====================================

Business logic between the routes (HTTP) and the database.

Service Inventory:
    - BootcampService:  list/get/create/update/delete, radius search, photo upload
    - advanced_results: filter/select/sort/paginate for list endpoints
    - Geocoder (abstract) / MapQuestGeocoder: address and zipcode lookup
    - FileService:      photo validation, storage and cleanup

Module-level singletons (bootcamp_service, geocoder_service, file_service)
are what routes import; tests patch them by name.
"""
