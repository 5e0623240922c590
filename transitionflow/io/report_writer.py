"""
Exportação de relatórios de data-flow em JSON
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Union

from transitionflow.core.models import ExportError
from transitionflow.analysis.models import DataFlowResult, ValidationResult

logger = logging.getLogger(__name__)


def build_document_report(
    flow: DataFlowResult,
    validation: Optional[ValidationResult] = None
) -> Dict[str, Any]:
    """Monta o relatório de um documento (extração + validação opcional)"""
    report = {'dataFlow': flow.to_dict()}
    if validation is not None:
        report['validation'] = validation.to_dict()
    return report


class ReportWriter:
    """Escreve relatórios JSON no diretório de saída"""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def write(self, data: Dict[str, Any], filename: str) -> Path:
        """
        Exporta dados para JSON

        Args:
            data: Conteúdo serializável
            filename: Nome do arquivo dentro do diretório de saída

        Returns:
            Caminho do arquivo escrito

        Raises:
            ExportError: Se houver erro ao exportar
        """
        output_file = self.output_dir / filename
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Erro ao exportar resultados: {e}")
            raise ExportError(f"Erro ao exportar resultados para {output_file}: {e}")

        logger.info(f"Resultados exportados para {output_file}")
        return output_file

    def write_batch_report(self, reports: Dict[str, Dict[str, Any]],
                           filename: str = "data_flow_report.json") -> Path:
        """Exporta relatório combinado de vários documentos com estatísticas"""
        if not reports:
            raise ExportError("Nenhum documento para exportar")

        missing_total = sum(
            len(r.get('validation', {}).get('missing', [])) for r in reports.values()
        )
        data = {
            'generated_at': datetime.now().isoformat(),
            'documents': reports,
            'statistics': {
                'total_documents': len(reports),
                'total_reads': sum(r['dataFlow']['summary']['totalReads'] for r in reports.values()),
                'total_writes': sum(r['dataFlow']['summary']['totalWrites'] for r in reports.values()),
                'total_missing': missing_total,
                'documents_with_missing': sorted(
                    name for name, r in reports.items()
                    if r.get('validation', {}).get('missing')
                ),
            },
        }
        return self.write(data, filename)
