"""ai-cli 命令行入口。

只负责参数解析与交互循环，请求编排交给 ai_cli.api.service。
"""

from typing import Optional

import typer
from prompt_toolkit import prompt as read_prompt

from ai_cli.api.service import AiCliService, RunOptions, build_image_job, validate_flags
from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import BusinessError, CredentialUnavailable
from ai_cli.infrastructure.logging.logger import logger, setup_logger
from ai_cli.infrastructure.speech.say import SaySpeaker
from ai_cli.providers import create_credential_provider, create_http_client

app = typer.Typer(
    help="CLI tool for interacting with 1min.ai API",
    add_completion=False,
    rich_markup_mode=None,
    pretty_exceptions_enable=False,
)

EXIT_WORDS = {"exit"}


def read_line(message: str) -> str:
    try:
        return read_prompt(message)
    except EOFError:
        return ""


def build_service(client, credentials) -> AiCliService:
    return AiCliService(client, credentials, speaker=SaySpeaker(settings.speech_command), cfg=settings)


def _run_interactive(service: AiCliService, opts: RunOptions) -> None:
    typer.echo("Starting interactive mode. Type 'exit' to quit.")
    if opts.prompt:
        typer.echo(f"You: {opts.prompt}")
        line = opts.prompt
    else:
        line = read_line("You: ")

    while line.strip() and line.strip().lower() not in EXIT_WORDS:
        try:
            service.ask(line, opts)
        except CredentialUnavailable:
            raise
        except BusinessError as e:
            # 单轮失败只中止当前这次对话，交互循环继续
            logger.error("exchange failed", extra={"extra": {"code": e.code, "status": e.http_status}})
            typer.echo(f"Error: {e.message}", err=True)
        line = read_line("You: ")


@app.command()
def main(
    ctx: typer.Context,
    prompt: Optional[str] = typer.Argument(None, help="The prompt to send to the AI"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Enable interactive mode"),
    voice_output: bool = typer.Option(False, "--voice-output", "-v", help="Enable voice output of AI responses"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print AI responses (only works with voice output)"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="The AI model to use"),
    words: Optional[int] = typer.Option(None, "--words", "-w", min=1, help="Maximum number of words in the response"),
    image_generation: bool = typer.Option(
        False,
        "--image-generation",
        "-g",
        help="Enable image generation mode (incompatible with interactive and voice modes)",
    ),
    size: Optional[str] = typer.Option(None, "--size", "-s", help="Image size (1024x1024, 1024x1792, 1792x1024)"),
    quality: Optional[str] = typer.Option(None, "--quality", help="Image quality (standard, hd)"),
    style: Optional[str] = typer.Option(None, "--style", help="Image style (vivid, natural)"),
    config: bool = typer.Option(False, "--config", help="Configure API key and exit"),
) -> None:
    opts = RunOptions(
        prompt=prompt,
        model=model,
        max_words=words,
        interactive=interactive,
        voice_output=voice_output,
        quiet=quiet,
        image_generation=image_generation,
        size=size,
        quality=quality,
        style=style,
    )
    credentials = create_credential_provider(settings)

    try:
        setup_logger(settings)
        if config:
            credentials.configure()
            typer.echo("API key saved successfully!")
            return

        validate_flags(opts)
        if not opts.image_generation and not opts.interactive and not opts.prompt:
            typer.echo(ctx.get_help())
            return

        with create_http_client(settings) as client:
            service = build_service(client, credentials)
            service.login()

            if opts.image_generation:
                job = build_image_job(opts, settings)
                typer.echo(f'Generating image with {job.model} model for prompt "{job.prompt}"...')
                path = service.generate_image(job)
                typer.echo(f"Image saved to {path}")
                return

            service.start_conversation(opts.prompt or "")
            if opts.interactive:
                _run_interactive(service, opts)
            else:
                service.ask(opts.prompt or "", opts)
    except BusinessError as e:
        logger.error(
            "command failed",
            extra={"extra": {"code": e.code, "status": e.http_status, "operation": e.extra.get("operation")}},
        )
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    except (KeyboardInterrupt, EOFError):
        typer.echo("", err=True)
        raise typer.Exit(code=130)

