"""
CLI para TransitionFlow usando Click
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime

import click
from tqdm import tqdm

from transitionflow.analysis.conditions import validate_conditions
from transitionflow.analysis.data_flow_extractor import DataFlowExtractor
from transitionflow.analysis.data_flow_validator import DataFlowValidator
from transitionflow.analysis.path_flow import PathDataFlowAnalyzer
from transitionflow.config import get_config
from transitionflow.core.models import TransitionFlowError
from transitionflow.io.document_loader import (
    DocumentLoader,
    load_json_file,
    load_prior_variables,
    load_schema,
    load_states,
    load_transitions,
)
from transitionflow.io.report_writer import ReportWriter, build_document_report


class TeeFileHandler(logging.Handler):
    """Handler que escreve em arquivo e também em stderr (stdout fica livre para o JSON)"""

    def __init__(self, file_path: Path):
        super().__init__()
        self.file_path = file_path
        self.console = sys.stderr
        self.file = open(self.file_path, 'a', encoding='utf-8')

    def close(self):
        """Fecha o arquivo quando handler é fechado"""
        if self.file:
            self.file.close()
            self.file = None
        super().close()

    def emit(self, record):
        """Escreve log em arquivo e stderr"""
        try:
            msg = self.format(record) + '\n'
            if self.file:
                self.file.write(msg)
                self.file.flush()
            self.console.write(msg)
            self.console.flush()
        except Exception:
            self.handleError(record)


def generate_log_filename(command_name: str, log_dir: Path) -> Path:
    """
    Gera nome de arquivo de log com timestamp e comando

    Args:
        command_name: Nome do comando executado
        log_dir: Diretório onde salvar o log

    Returns:
        Path completo do arquivo de log
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    safe_command = command_name.replace('-', '_')
    return log_dir / f"{safe_command}_{timestamp}.log"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    auto_log: bool = False,
    command_name: Optional[str] = None,
    log_dir: Optional[str] = None
) -> Optional[Path]:
    """
    Configura logging com suporte a auto-logging

    Args:
        log_level: Nível de logging (DEBUG, INFO, WARNING, ERROR)
        log_file: Arquivo de log (opcional, sobrescreve auto-logging)
        auto_log: Se True, cria arquivo de log automaticamente
        command_name: Nome do comando (para auto-logging)
        log_dir: Diretório para logs (para auto-logging)

    Returns:
        Path do arquivo de log criado (se houver), None caso contrário
    """
    log_file_path = None

    if log_file:
        log_file_path = Path(log_file)
    elif auto_log and command_name and log_dir:
        log_file_path = generate_log_filename(command_name, Path(log_dir))

    handlers = []
    if log_file_path:
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(TeeFileHandler(log_file_path))
        except OSError as e:
            # Sem arquivo, segue apenas com console
            logging.getLogger(__name__).warning(f"Erro ao criar arquivo de log: {e}, usando apenas console")
            log_file_path = None
    if not handlers:
        # Console em stderr para não misturar com o JSON de saída
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    return log_file_path


def _emit_json(data, output: Optional[str]) -> None:
    """Escreve JSON em arquivo ou stdout"""
    if output:
        path = ReportWriter(Path(output).parent).write(data, Path(output).name)
        click.echo(f"✓ JSON exportado: {path}")
    else:
        click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _load_validation_inputs(schema: Optional[str], prior: Optional[str]):
    schema_fields = load_schema(schema) if schema else []
    prior_variables = load_prior_variables(prior) if prior else []
    return schema_fields, prior_variables


def _fail(message: str) -> None:
    click.echo(f"❌ Erro: {message}", err=True)
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--verbose', '-v', is_flag=True, help='Modo verbose (DEBUG)')
@click.option('--log-file', type=click.Path(), help='Arquivo de log (sobrescreve auto-logging)')
@click.option('--no-auto-log', is_flag=True, default=False, help='Desabilita criação automática de logs')
@click.pass_context
def cli(ctx, verbose, log_file, no_auto_log):
    """TransitionFlow - Análise de data-flow de transições de testes"""
    ctx.ensure_object(dict)
    config = get_config()
    ctx.obj['config'] = config

    command_name = ctx.invoked_subcommand or 'cli'
    use_auto_log = not log_file and not no_auto_log and config.auto_log_enabled

    log_level = "DEBUG" if verbose else config.log_level
    ctx.obj['log_file_path'] = setup_logging(
        log_level=log_level,
        log_file=log_file or config.log_file,
        auto_log=use_auto_log,
        command_name=command_name,
        log_dir=config.log_dir
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(), help='Arquivo JSON de saída (padrão: stdout)')
def extract(document, output):
    """Extrai leituras e escritas de um documento de transição"""
    try:
        flow = DataFlowExtractor().extract(load_json_file(document))
        _emit_json(flow.to_dict(), output)
    except TransitionFlowError as e:
        _fail(str(e))


@cli.command()
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
@click.option('--schema', '-s', type=click.Path(exists=True, dir_okay=False), help='Schema de testData (JSON)')
@click.option('--prior', '-p', type=click.Path(exists=True, dir_okay=False),
              help='Variáveis disponíveis de estados anteriores (JSON)')
@click.option('--strict/--no-strict', default=None, help='Falha se houver leituras ausentes')
@click.option('--json', 'as_json', is_flag=True, default=False, help='Saída em JSON')
@click.pass_context
def validate(ctx, document, schema, prior, strict, as_json):
    """Valida leituras de um documento contra schema e variáveis armazenadas"""
    config = ctx.obj['config']
    strict = config.strict_validation if strict is None else strict

    try:
        schema_fields, prior_variables = _load_validation_inputs(schema, prior)
        flow = DataFlowExtractor().extract(load_json_file(document))
        result = DataFlowValidator().validate(flow, schema_fields, prior_variables)
    except TransitionFlowError as e:
        _fail(str(e))
        return

    if as_json:
        _emit_json(build_document_report(flow, result), None)
    else:
        click.echo(f"📥 Leituras: {flow.summary.total_reads} "
                   f"({flow.summary.required_reads} obrigatórias)")
        click.echo(f"📤 Escritas: {flow.summary.total_writes}")
        for entry in result.valid:
            click.echo(f"  ✓ {entry.field} (testData)")
        for entry in result.from_stored:
            click.echo(f"  ✓ {entry.field} (stored)")
        for entry in result.warnings:
            click.echo(f"  ⚠️  {entry.field}: {entry.reason}")
        for entry in result.missing:
            marker = ' [obrigatório]' if entry.read.required else ''
            click.echo(f"  ❌ {entry.field}{marker}: {entry.reason}")

    if strict and result.has_missing:
        sys.exit(1)


@cli.command('analyze-files')
@click.option('--directory', '-d', type=click.Path(file_okay=False),
              help='Diretório com documentos de transição (padrão: config)')
@click.option('--extension', '-e', default=None, help='Extensão dos arquivos (padrão: json)')
@click.option('--output-dir', '-o', type=click.Path(), help='Diretório de saída (padrão: ./output)')
@click.option('--schema', '-s', type=click.Path(exists=True, dir_okay=False), help='Schema de testData (JSON)')
@click.option('--prior', '-p', type=click.Path(exists=True, dir_okay=False),
              help='Variáveis disponíveis de estados anteriores (JSON)')
@click.option('--strict/--no-strict', default=None, help='Falha se houver leituras ausentes')
@click.pass_context
def analyze_files(ctx, directory, extension, output_dir, schema, prior, strict):
    """Analisa todos os documentos de transição de um diretório"""
    config = ctx.obj['config']
    logger = logging.getLogger(__name__)
    strict = config.strict_validation if strict is None else strict

    try:
        schema_fields, prior_variables = _load_validation_inputs(schema, prior)
        loader = DocumentLoader(directory or config.transitions_dir, extension or config.file_extension)
        documents = loader.load_documents()

        extractor = DataFlowExtractor()
        validator = DataFlowValidator()
        reports = {}
        for name, document in tqdm(documents.items(), desc="Analisando transições", unit="doc"):
            flow = extractor.extract(document)
            result = validator.validate(flow, schema_fields, prior_variables)
            reports[name] = build_document_report(flow, result)

        writer = ReportWriter(output_dir or config.output_dir)
        report_file = writer.write_batch_report(reports)
    except TransitionFlowError as e:
        logger.error(f"Falha na análise: {e}")
        _fail(str(e))
        return

    click.echo(f"✓ Relatório exportado: {report_file}")

    total_missing = sum(len(r['validation']['missing']) for r in reports.values())
    click.echo("\n" + "=" * 60)
    click.echo("ESTATÍSTICAS")
    click.echo("=" * 60)
    click.echo(f"Total de documentos: {len(reports)}")
    click.echo(f"Leituras ausentes: {total_missing}")
    for name, report in reports.items():
        missing = [m['field'] for m in report['validation']['missing']]
        if missing:
            click.echo(f"  {name}: {', '.join(missing)}")

    click.echo("\n✅ Análise concluída!")
    if strict and total_missing:
        sys.exit(1)


@cli.command()
@click.option('--transitions', '-t', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Arquivo JSON com a lista de transições')
@click.option('--states', type=click.Path(exists=True, dir_okay=False),
              help='Arquivo JSON com o mapa de estados (xstateConfig)')
@click.option('--start', required=True, help='Estado inicial')
@click.option('--end', required=True, help='Estado final')
@click.option('--max-depth', type=int, default=None, help='Número máximo de estados no caminho (padrão: 10)')
@click.option('--output', '-o', type=click.Path(), help='Arquivo JSON de saída (padrão: stdout)')
@click.pass_context
def paths(ctx, transitions, states, start, end, max_depth, output):
    """Compara requisitos de dados entre caminhos de START até END"""
    config = ctx.obj['config']

    try:
        analyzer = PathDataFlowAnalyzer(
            load_transitions(transitions),
            load_states(states) if states else {}
        )
        found = analyzer.find_all_paths(start, end, max_depth or config.max_path_depth)
        if not found:
            _fail(f'Nenhum caminho encontrado de "{start}" até "{end}"')
            return
        comparison = analyzer.compare_path_requirements(found)
        _emit_json(comparison.to_dict(), output)
    except TransitionFlowError as e:
        _fail(str(e))


@cli.command('lint-conditions')
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
def lint_conditions(document):
    """Valida blocos de condição do documento e de seus steps"""
    try:
        data = load_json_file(document)
    except TransitionFlowError as e:
        _fail(str(e))
        return

    errors = []
    if isinstance(data, dict):
        errors.extend(validate_conditions(data.get('conditions')))
        steps = data.get('steps') if isinstance(data.get('steps'), list) else []
        for i, step in enumerate(steps):
            if isinstance(step, dict):
                errors.extend(f"Step {i + 1}: {err}" for err in validate_conditions(step.get('conditions')))

    if errors:
        click.echo("❌ Erros:")
        for error in errors:
            click.echo(f"   - {error}", err=True)
        sys.exit(1)

    click.echo("✅ Condições válidas")


if __name__ == '__main__':
    cli()
