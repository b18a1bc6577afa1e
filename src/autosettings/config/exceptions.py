"""
Exception classes with built-in guidance for build definition loading.
"""


class ConfigException(Exception):
    """Base exception for all configuration errors."""
    def __init__(self, message: str, error_type: str = None, unit_name: str = None,
                 capability: str = None, source: str = None):
        super().__init__(message)
        self.error_type = error_type
        self.unit_name = unit_name
        self.capability = capability
        self.source = source
        self.guidance = self._generate_guidance()

    def _generate_guidance(self):
        """Override in subclasses to provide specific guidance."""
        return f"""
❌ Configuration error: {self}
💡 Check your build definition and try again
"""


class BuildDefinitionException(ConfigException):
    """Raised when build.yaml or a plugin file cannot be read or is malformed."""
    def __init__(self, message: str, source: str = None, **kwargs):
        super().__init__(message, error_type="build_definition", source=source, **kwargs)

    def _generate_guidance(self):
        where = self.source or 'build definition'
        return f"""
❌ Invalid build definition in {where}: {self}
💡 Fix the file and validate it with: autosettings check
"""


class CapabilityCycleException(ConfigException):
    """Raised when capability requirements form a cycle."""
    def __init__(self, message: str, cycle: list = None, **kwargs):
        self.cycle = list(cycle or [])
        super().__init__(message, error_type="capability_cycle", **kwargs)

    def _generate_guidance(self):
        path = ' -> '.join(self.cycle) if self.cycle else 'Unknown'
        return f"""
❌ Capability requirements form a cycle: {path}
💡 Remove one of the 'requires' entries along this path so that the
   capabilities can be enabled in a well-defined order.
"""


class UndeclaredCapabilityException(ConfigException):
    """Raised when a capability or bundle is referenced but never declared."""
    def __init__(self, message: str, capability: str, referenced_by: str = None, **kwargs):
        self.referenced_by = referenced_by
        super().__init__(message, error_type="undeclared_capability", capability=capability, **kwargs)

    def _generate_guidance(self):
        origin = f" (referenced by '{self.referenced_by}')" if self.referenced_by else ""
        return f"""
❌ Capability '{self.capability}' is not declared{origin}
💡 Resolve this in one of the following ways:
   1. Declare it under 'capabilities' in build.yaml
   2. Or add a plugin file: project/{self.capability}.yaml
"""


class DuplicateDefinitionException(ConfigException):
    """Raised when a bundle, capability or unit name is defined twice."""
    def __init__(self, message: str, kind: str, name: str, **kwargs):
        self.kind = kind
        self.name = name
        super().__init__(message, error_type="duplicate_definition", **kwargs)

    def _generate_guidance(self):
        return f"""
❌ The {self.kind} '{self.name}' is defined more than once
💡 Rename or remove one of the definitions
"""


class CapabilityConflictException(ConfigException):
    """Raised when a unit disables a capability it still requires."""
    def __init__(self, message: str, unit_name: str, capability: str, required_by: str = None, **kwargs):
        self.required_by = required_by
        super().__init__(message, error_type="capability_conflict", unit_name=unit_name,
                         capability=capability, **kwargs)

    def _generate_guidance(self):
        reason = f"'{self.required_by}' requires it" if self.required_by else "it is enabled explicitly"
        return f"""
❌ Unit '{self.unit_name}' disables '{self.capability}' but {reason}
💡 Remove '{self.capability}' from the unit's 'disables' list, or stop enabling
   the capabilities that depend on it.
"""


class UnknownUnitException(ConfigException):
    """Raised when a query names a build unit that was never declared."""
    def __init__(self, message: str, unit_name: str, available: list = None, **kwargs):
        self.available = list(available or [])
        super().__init__(message, error_type="unknown_unit", unit_name=unit_name, **kwargs)

    def _generate_guidance(self):
        available = ', '.join(self.available) if self.available else 'none'
        return f"""
❌ Unknown build unit '{self.unit_name}'
💡 Available units: {available}
   List them with: autosettings list-units
"""


class RegistryFrozenException(ConfigException):
    """Raised when a registry is modified after it was validated."""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_type="registry_frozen", **kwargs)
