from .context_managers import change_cwd
