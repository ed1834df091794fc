import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Test = "test"
    Local = "local"
