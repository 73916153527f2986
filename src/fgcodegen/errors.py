class FgcodegenError(Exception):
    """base class of all fgcodegen exceptions

    ``stage`` names the pipeline stage which raised the error: ``"commandline"``,
    ``"parse"``, ``"resolve"``, or ``"codegen"``.
    """

    stage = None


class CommandLineError(FgcodegenError, ValueError):
    stage = "commandline"

    def __init__(self, msg, option=None):
        super().__init__(msg)
        self.option = option


class CodegenError(FgcodegenError, ValueError):
    stage = "codegen"
