"""
API 평가 스크립트

사용법:
    python evaluate_api.py --endpoint http://localhost:8000 --images test_images/ --clean

설명:
    - 지정된 디렉토리의 이미지마다 세션을 만들고 업로드
    - 각 카테고리별로 조언 + 시각화 생성 실행
    - 처리 시간, 조언/시각화 개수, 실패율 측정
    - 결과를 evaluation_report.md에 저장
"""

import requests
import os
import time
import argparse
from typing import List, Dict, Any, Optional
import statistics

CATEGORIES = ["Lighting", "Color Palette", "Layout & Flow", "Textures & Fabrics", "Decor & Styling"]
EXPECTED_ADVICE = 4
EXPECTED_VISUALIZATIONS = 4


class APIEvaluator:
    def __init__(self, endpoint: str, clean: bool = False, timeout: int = 300):
        self.endpoint = endpoint.rstrip('/')
        self.api_url = f"{self.endpoint}/api"
        self.clean = clean
        self.timeout = timeout

    def _create_session(self) -> str:
        response = requests.post(f"{self.api_url}/sessions", timeout=self.timeout)
        response.raise_for_status()
        return response.json()['session_id']

    def _upload(self, session_id: str, image_path: str) -> None:
        with open(image_path, 'rb') as f:
            files = {'file': (os.path.basename(image_path), f, 'image/jpeg')}
            response = requests.post(
                f"{self.api_url}/sessions/{session_id}/upload",
                files=files,
                timeout=self.timeout
            )
        response.raise_for_status()

    def _clean(self, session_id: str) -> Optional[str]:
        response = requests.put(
            f"{self.api_url}/sessions/{session_id}/clean-mode",
            json={'enabled': True},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json().get('error')

    def evaluate_category(self, session_id: str, category: str) -> Dict[str, Any]:
        """카테고리 하나에 대한 생성 실행"""
        start_time = time.time()
        try:
            requests.put(
                f"{self.api_url}/sessions/{session_id}/category",
                json={'category': category},
                timeout=self.timeout
            ).raise_for_status()

            response = requests.post(f"{self.api_url}/sessions/{session_id}/generate", timeout=self.timeout)
            elapsed_time = time.time() - start_time
            response.raise_for_status()
            data = response.json()

            return {
                'category': category,
                'success': data.get('error') is None,
                'processing_time': elapsed_time,
                'advice_count': len(data.get('advice', [])),
                'visualization_count': len(data.get('visualizations', [])),
                'error': data.get('error')
            }
        except Exception as e:
            return {
                'category': category,
                'success': False,
                'processing_time': time.time() - start_time,
                'advice_count': 0,
                'visualization_count': 0,
                'error': str(e)
            }

    def evaluate_image(self, image_path: str) -> Dict[str, Any]:
        """이미지 하나에 대해 모든 카테고리 평가"""
        print(f"\nEvaluating: {image_path}")
        try:
            session_id = self._create_session()
            self._upload(session_id, image_path)
            clean_error = self._clean(session_id) if self.clean else None
        except Exception as e:
            return {'image': os.path.basename(image_path), 'success': False, 'error': str(e), 'results': []}

        results = []
        for category in CATEGORIES:
            result = self.evaluate_category(session_id, category)
            print(f"  {category}: advice={result['advice_count']} visuals={result['visualization_count']} ({result['processing_time']:.1f}s)")
            results.append(result)

        requests.delete(f"{self.api_url}/sessions/{session_id}", timeout=self.timeout)
        return {
            'image': os.path.basename(image_path),
            'success': True,
            'clean_error': clean_error,
            'error': None,
            'results': results
        }

    def evaluate_directory(self, images_dir: str) -> List[Dict[str, Any]]:
        """디렉토리의 모든 이미지 평가"""
        image_extensions = {'.jpg', '.jpeg', '.png', '.webp'}
        image_files = [
            os.path.join(images_dir, f)
            for f in sorted(os.listdir(images_dir))
            if os.path.splitext(f)[1].lower() in image_extensions
        ]

        print(f"Found {len(image_files)} images in {images_dir}")

        results = []
        for image_path in image_files:
            results.append(self.evaluate_image(image_path))
            time.sleep(1)  # 서버 부하 방지

        return results

    def generate_report(self, results: List[Dict[str, Any]], output_file: str = "evaluation_report.md"):
        """평가 보고서 생성"""
        runs = [r for image in results for r in image['results']]
        total_runs = len(runs)
        successful_runs = sum(1 for r in runs if r['success'])
        times = [r['processing_time'] for r in runs if r['success']]
        complete_advice = sum(1 for r in runs if r['advice_count'] == EXPECTED_ADVICE)
        complete_visuals = sum(1 for r in runs if r['visualization_count'] == EXPECTED_VISUALIZATIONS)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write("# Lumina 인테리어 API 평가 보고서\n\n")

            f.write("## 1. 전체 요약\n\n")
            f.write(f"- 테스트 날짜: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"- API 엔드포인트: {self.api_url}\n")
            f.write(f"- 정리 모드: {'사용' if self.clean else '미사용'}\n")
            f.write(f"- 이미지 수: {len(results)}\n")
            f.write(f"- 생성 실행 수: {total_runs}\n")
            if total_runs:
                f.write(f"- 성공: {successful_runs} ({successful_runs/total_runs*100:.1f}%)\n")
                f.write(f"- 조언 {EXPECTED_ADVICE}개 완비: {complete_advice}/{total_runs}\n")
                f.write(f"- 시각화 {EXPECTED_VISUALIZATIONS}개 완비: {complete_visuals}/{total_runs}\n")
            f.write("\n")

            f.write("## 2. 처리 시간\n\n")
            if times:
                f.write(f"- 평균: {statistics.mean(times):.2f}초\n")
                f.write(f"- 최소: {min(times):.2f}초\n")
                f.write(f"- 최대: {max(times):.2f}초\n")
                f.write(f"- 중앙값: {statistics.median(times):.2f}초\n\n")
            else:
                f.write("측정 불가\n\n")

            f.write("## 3. 카테고리별 결과\n\n")
            f.write("| 카테고리 | 성공 | 실행 | 평균 조언 | 평균 시각화 |\n")
            f.write("|----------|------|------|-----------|-------------|\n")
            for category in CATEGORIES:
                category_runs = [r for r in runs if r['category'] == category]
                if not category_runs:
                    continue
                success = sum(1 for r in category_runs if r['success'])
                avg_advice = statistics.mean(r['advice_count'] for r in category_runs)
                avg_visuals = statistics.mean(r['visualization_count'] for r in category_runs)
                f.write(f"| {category} | {success} | {len(category_runs)} | {avg_advice:.1f} | {avg_visuals:.1f} |\n")
            f.write("\n")

            f.write("## 4. 이미지별 결과\n\n")
            for idx, image in enumerate(results, 1):
                f.write(f"### 이미지 {idx}: {image['image']}\n\n")
                if not image['success']:
                    f.write(f"- 오류: {image['error']}\n\n")
                    continue
                if image.get('clean_error'):
                    f.write(f"- 정리 실패: {image['clean_error']}\n")
                for r in image['results']:
                    status = "성공" if r['success'] else "실패"
                    f.write(f"- **{r['category']}**: {status}, 조언 {r['advice_count']}, 시각화 {r['visualization_count']}, {r['processing_time']:.2f}초\n")
                    if r['error']:
                        f.write(f"  - 오류: {r['error']}\n")
                f.write("\n")

        print(f"\n평가 보고서가 {output_file}에 저장되었습니다.")


def main():
    parser = argparse.ArgumentParser(description='Lumina 인테리어 API 평가')
    parser.add_argument('--endpoint', default='http://localhost:8000', help='API 엔드포인트 URL')
    parser.add_argument('--images', default='test_images', help='테스트 이미지 디렉토리')
    parser.add_argument('--output', default='evaluation_report.md', help='평가 보고서 출력 파일')
    parser.add_argument('--clean', action='store_true', help='생성 전에 정리 모드 활성화')

    args = parser.parse_args()

    # 이미지 디렉토리 확인
    if not os.path.exists(args.images):
        print(f"오류: 이미지 디렉토리 '{args.images}'를 찾을 수 없습니다.")
        print(f"테스트 이미지를 {args.images} 디렉토리에 넣어주세요.")
        return

    evaluator = APIEvaluator(args.endpoint, clean=args.clean)
    results = evaluator.evaluate_directory(args.images)
    evaluator.generate_report(results, args.output)

    runs = [r for image in results for r in image['results']]
    successful = sum(1 for r in runs if r['success'])
    print(f"\n총 {len(runs)}회 생성 실행 완료")
    print(f"성공: {successful}, 실패: {len(runs) - successful}")


if __name__ == "__main__":
    main()
