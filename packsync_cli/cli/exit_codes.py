"""Standard exit codes for packsync.

Every failure exits with the same code so scripts only need to check for
success. Interrupts keep the shell convention of 128 + signal number.
"""


class ExitCode:
    """Exit codes for packsync.
    
    - 0: Success
    - 1: Any error (usage, configuration, network, filesystem)
    - 130: Terminated by Ctrl+C (SIGINT)
    """
    
    SUCCESS = 0
    GENERAL_ERROR = 1
    CANCELLED = 130  # Ctrl+C (SIGINT = 2)
    
    @classmethod
    def get_name(cls, code: int) -> str:
        """Get the name of an exit code.
        
        Args:
            code: The exit code value
            
        Returns:
            Human-readable name for the exit code
        """
        names = {
            cls.SUCCESS: "SUCCESS",
            cls.GENERAL_ERROR: "GENERAL_ERROR",
            cls.CANCELLED: "CANCELLED",
        }
        return names.get(code, f"UNKNOWN({code})")
    
    @classmethod
    def get_description(cls, code: int) -> str:
        """Get the description of an exit code."""
        descriptions = {
            cls.SUCCESS: "Operation completed successfully",
            cls.GENERAL_ERROR: "The operation failed",
            cls.CANCELLED: "Operation cancelled by user",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
