"""
Celery tasks for background ranking recomputation.
"""
