"""
Services module.

Import service singletons from their modules (tubebrief.services.brief_service,
tubebrief.services.tag_service, tubebrief.services.job_service); this package
is imported by the configuration layer and stays free of eager imports.
"""
