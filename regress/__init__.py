from regress.config import RegressionConfig


def create_dispatcher(config: RegressionConfig | None = None):
    config = config or RegressionConfig.from_env()

    # Backend is selected before any job is built; unknown names raise ConfigError
    from regress.services.backends import create_backend
    from regress.services.dispatcher import Dispatcher
    from regress.services.poller import CompletionPoller

    backend = create_backend(config)
    poller = CompletionPoller(cycle_period=config.cycle_period)

    return Dispatcher(
        backend=backend,
        out_dir=config.out_dir,
        poller=poller,
        seed=config.seed,
    )
