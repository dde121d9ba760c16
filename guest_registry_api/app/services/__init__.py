"""
Service layer abstraction.

Services hold the business logic: the validation stages and the
registration workflow.  API handlers only translate HTTP to service
calls, so the logic can be exercised without a web server.
"""
