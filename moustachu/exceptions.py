class MoustachuError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(MoustachuError):
    # errors related to configuration.
    pass

class DataLoadError(MoustachuError):
    # errors while reading or parsing the data file or partial files.
    pass

class OutputError(MoustachuError):
    # errors during output operations.
    pass

class TemplateError(MoustachuError):
    # errors related to template rendering.
    pass

class TemplateSyntaxError(TemplateError):
    # malformed tag syntax found by the tokenizer.
    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)

class SectionMismatchError(TemplateError):
    # a section that is never closed, or an ender without its opener.
    pass

class PartialRecursionError(TemplateError):
    # partial expansion nested deeper than the configured limit.
    pass
