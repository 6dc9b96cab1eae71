"""Services - credential handling and user persistence, called by thin routes."""
