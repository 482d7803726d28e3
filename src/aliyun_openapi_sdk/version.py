"""Version information for the Aliyun OpenAPI Python SDK"""

__version__ = "1.1.0"
